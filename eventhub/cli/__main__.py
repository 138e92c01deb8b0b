"""Entry point for running CLI as module.

Usage:
    python -m eventhub.cli run --dry-run
    python -m eventhub.cli sources
"""

from eventhub.cli.main import main

if __name__ == "__main__":
    main()
