"""
weighbox CLI entry point.

Usage:
    python -m weighbox.cli solve 12 3
    python -m weighbox.cli solve 9 2 --direction lighter
    python -m weighbox.cli verify 12-3-heavier_lighter.output.json 12
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
