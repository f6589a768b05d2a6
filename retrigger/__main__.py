"""
Thin wrapper for the retrigger entry point.

Real implementation lives in retrigger.main.
Use: python -m retrigger
"""

import sys

from retrigger.main import main

if __name__ == "__main__":
    sys.exit(main())
