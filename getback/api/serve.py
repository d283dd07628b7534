"""Run the HTTP API under uvicorn."""

from __future__ import annotations

import argparse
import os

import uvicorn

APP_PATH = "getback.api.main:app"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Serve the getback HTTP API")
    parser.add_argument("--host", default=os.getenv("GETBACK_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("GETBACK_PORT", "8000")))
    parser.add_argument("--workers", type=int, default=1)
    args = parser.parse_args(argv)

    uvicorn.run(APP_PATH, host=args.host, port=args.port, workers=max(1, args.workers))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
