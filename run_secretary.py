"""Convenience launcher for the terminal assistant.

Usage:
  python run_secretary.py [today|period|config|version]

Equivalent to the ``secretary`` console script installed with the package.
"""

import sys

from worklog_app.cli import main

if __name__ == "__main__":
    sys.exit(main())
