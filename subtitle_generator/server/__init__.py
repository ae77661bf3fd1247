"""HTTP API for the subtitle generator (FastAPI app in app.py)."""
