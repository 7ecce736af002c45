#!/usr/bin/env python3
"""
Serve the rewards lookup web form.

**Usage**:
    python actions/serve_rewards_web.py
    python actions/serve_rewards_web.py --host 0.0.0.0 --port 8080

Then open http://localhost:3000 and pick a pool (or "All Pools") and an
epoch. Settings come from the environment / .env file like the CLI.

**Exit codes**:
  - 0: Server stopped normally
  - 1: Configuration error
"""

import argparse
import sys
from pathlib import Path

# Add project root to Python path so we can import src modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn

from src.config.settings import Settings
from src.utils.log_setup import configure_logging
from src.web.app import create_app

DEFAULT_PORT = 3000


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Serve the Stryke rewards lookup web form")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"Port (default: {DEFAULT_PORT})")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    configure_logging()

    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    app = create_app(settings)
    print(f"Server running at http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
