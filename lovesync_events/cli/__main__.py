"""Entry point for running the CLI as a module.

Usage:
    python -m lovesync_events.cli master --mode batch
"""

from lovesync_events.cli.main import main

if __name__ == "__main__":
    main()
