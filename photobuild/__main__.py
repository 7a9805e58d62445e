"""
Main entry point for running the package as a module.

Usage:
    python -m photobuild build --config build.json
    python -m photobuild report --config build.json
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
