"""
Server entry point for the ytscribe transcript API.
"""

import os
import argparse
import uvicorn
from dotenv import load_dotenv

from ytscribe.config import config


def main():
    """Serve the transcript API with uvicorn."""
    load_dotenv()

    parser = argparse.ArgumentParser(description="ytscribe transcript API")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to listen on")
    parser.add_argument("--port", type=int, default=config.PORT, help="Port to listen on (default: PORT or 3004)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    print(f"{config.APP_NAME} v{config.APP_VERSION} ({os.getenv('ENVIRONMENT', 'development')}, region {config.REGION})")
    print(f"Cache store: {'redis' if config.REDIS_URL else 'in-memory'}")
    print(f"Listening on {args.host}:{args.port}")

    uvicorn.run(
        "ytscribe.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
