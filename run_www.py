#!/usr/bin/env python3
from __future__ import annotations

import logging
import os
import sys

def main() -> None:
    host = os.environ.get("RECIBOWATCH_HOST") or "127.0.0.1"
    port = int(os.environ.get("RECIBOWATCH_PORT") or "8000")
    log_level = os.environ.get("RECIBOWATCH_LOG_LEVEL") or "info"
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        import uvicorn
    except ImportError:
        print("uvicorn missing. Install with: pip install -e .", file=sys.stderr)
        raise
    uvicorn.run("webapp.server:app", host=host, port=port, log_level=log_level)

if __name__ == "__main__":
    main()
