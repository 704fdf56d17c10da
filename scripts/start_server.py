#!/usr/bin/env python3
# =============================================================================
# scripts/start_server.py - Listener Entry Point
# =============================================================================
# Starts the HTTP listener (and the HTTPS listener on port + 10000 when
# SERVE_HTTPS=true) and runs until interrupted.
#
# Usage:
#   # Start on API_PORT from the environment (default 8000)
#   poetry run python scripts/start_server.py
#
#   # Start on a specific port
#   poetry run python scripts/start_server.py 3000
#
# Prerequisites:
#   - For HTTPS: HTTPS_KEY and HTTPS_CERT must point to PEM files
# =============================================================================

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import settings
from app.main import application, serve


def main():
    """Start the listeners."""
    port = sys.argv[1] if len(sys.argv) > 1 else settings.API_PORT

    print("=" * 60)
    print("appshell")
    print("=" * 60)
    print()
    print(f"Listening on port {port} ({settings.ENVIRONMENT})")
    if settings.SERVE_HTTPS:
        print(f"HTTPS on port {int(port) + 10000}")
    print("Press Ctrl+C to stop")
    print()

    asyncio.run(serve(application, port, settings.ENVIRONMENT))


if __name__ == "__main__":
    main()
