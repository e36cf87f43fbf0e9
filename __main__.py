"""CLI entry point for uiforge.

Run from the repository root with ``python . {command} [args]``.
"""

import sys

from uiforge.cli import main

if __name__ == "__main__":
    sys.exit(main())
