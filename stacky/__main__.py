"""
    Invoke the stacky command line tool

    Usage: `python -m stacky`
"""
import sys

from . import tool

if __name__ == "__main__":
    sys.exit(tool.main())
