"""
Main entry point for running gridwm as a module.

Usage:
    python -m gridwm [options] COMMAND
"""

from .cli import main

if __name__ == "__main__":
    main()
