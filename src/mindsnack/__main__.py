"""Main entry point for the Mindsnack CLI.

Usage:
    python -m mindsnack --help
    mindsnack --help  # If installed via pip
"""

from mindsnack.cli import main

if __name__ == "__main__":
    main()
