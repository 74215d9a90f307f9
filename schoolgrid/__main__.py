"""
Package entry point.

Allows running the application via:

    python -m schoolgrid

This simply forwards execution to schoolgrid.cli.main().
"""

from schoolgrid.cli import main

if __name__ == "__main__":
    main()
