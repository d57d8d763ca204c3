from __future__ import annotations

import logging
import os

import uvicorn

from prisma_safety.api.main import app


def run() -> None:
    logging.basicConfig(
        level=(os.getenv("PRISMA_SAFETY_LOG_LEVEL") or "INFO").strip().upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.getenv("PRISMA_SAFETY_HOST", "0.0.0.0")
    port = int(os.getenv("PRISMA_SAFETY_PORT", "8001"))
    reload = (os.getenv("PRISMA_SAFETY_RELOAD") or "").strip().lower() in ("1", "true", "yes")
    # reload needs an import string, not the app object
    uvicorn.run("prisma_safety.api.main:app" if reload else app, host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
