"""
Main entry point for tasklog when run as a module.

Allows running with: python -m tasklog
"""

from tasklog.cli.main import app

if __name__ == "__main__":
    app()
