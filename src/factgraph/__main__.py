"""
Main entry point for FactGraph.

Runs the command line interface; ``python -m factgraph serve`` starts the
API server.
"""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
