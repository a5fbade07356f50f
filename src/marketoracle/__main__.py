"""
Entry point for the oracle service.

Usage:
    python -m marketoracle
    marketoracle  # if installed via pip
"""

import sys


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    from marketoracle.api.server import main as serve

    try:
        serve()
    except KeyboardInterrupt:
        print("\nInterrupted by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
