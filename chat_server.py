#!/usr/bin/env python3
"""Main entry point for the IT operations assistant chat server."""

import sys
import os
import argparse
import asyncio
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Add the project root to Python path for src imports
sys.path.insert(0, os.path.dirname(__file__))

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="IT Operations Assistant Chat Server")
    parser.add_argument("--host", type=str, default=None,
                        help="Host to bind server (default: server.host config, 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None,
                        help="Port to bind server (default: server.port config, 8000)")

    args = parser.parse_args()

    from src.orchestrator.main import main
    try:
        asyncio.run(main(args.host, args.port))
    except KeyboardInterrupt:
        pass
