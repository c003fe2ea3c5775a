import logging
import os

from fastapi import FastAPI

from . import __version__
from .config import settings
from .routes import search

logging.basicConfig(
    level=logging.DEBUG if os.getenv("BOORUHUB_DEBUG") == "true" else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=settings.APP_NAME, version=__version__)

app.include_router(search.router)

@app.get("/health")
async def health():
    """Liveness probe"""
    return {"status": "ok", "version": __version__}
