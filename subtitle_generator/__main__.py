"""Package entry point for ``python -m subtitle_generator``.

WHY: Users run the generator as ``python -m subtitle_generator video.mp4``.
Python's ``-m`` flag looks for ``__main__.py`` inside the package and
executes it.

HOW: Delegates to the CLI's main() function.
"""

from subtitle_generator.cli import main

if __name__ == "__main__":
    main()
