#!/usr/bin/env python3
"""
rumbac - Main entry point.
This is a wrapper script that calls the main function from the rumbac package.
"""

import sys
from rumbac.cli import main

if __name__ == "__main__":
    sys.exit(main())
