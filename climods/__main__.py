"""
Package entry point.

Allows running the application via:

    python -m climods

This simply forwards execution to climods.cli.main().
"""

from climods.cli import main

if __name__ == "__main__":
    main()
