"""Run the character builder API server."""

import sys

from charbuilder.main import main

if __name__ == "__main__":
    print("=" * 50)
    print("  Character Builder - API Server")
    print("  5th Edition core rules")
    print("=" * 50)
    print()
    print("Press Ctrl+C to stop")
    print()

    sys.exit(main())
