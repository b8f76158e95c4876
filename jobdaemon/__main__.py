"""
Entry point for running the worker via `python -m jobdaemon`.
"""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
