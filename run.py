import argparse
import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Serve the booruhub query API")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging and auto-reload")
    parser.add_argument("--host", default=os.getenv("APP_HOST", "127.0.0.1"), help="Interface to bind")
    parser.add_argument("--port", type=int, default=int(os.getenv("APP_PORT", 8000)), help="Port to listen on")
    parser.add_argument("--seed", type=int, help="Seed random post selection (reproducible offsets)")
    args = parser.parse_args()

    if args.debug:
        os.environ["BOORUHUB_DEBUG"] = "true"
    if args.seed is not None:
        os.environ["BOORUHUB_RANDOM_SEED"] = str(args.seed)

    uvicorn.run("booruhub.main:app", host=args.host, port=args.port, reload=args.debug)
