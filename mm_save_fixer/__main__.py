"""
Main entry point for running the Motorsport Manager Practice Driver Fixer

Usage:
    python -m mm_save_fixer --help
"""

import sys

from .cli import main

if __name__ == '__main__':
    sys.exit(main())
