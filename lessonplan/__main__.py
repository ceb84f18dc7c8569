"""
Package entry point.

Allows running the application via:

    python -m lessonplan

This simply forwards execution to lessonplan.cli.main().
"""

from lessonplan.cli import main

if __name__ == "__main__":
    main()
