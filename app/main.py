# app/main.py
import logging

from fastapi import FastAPI

from app.api.routes import router as api_router
from app.config import settings


def _setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")


_setup_logging(settings.search_debug)

app = FastAPI(title="Site Search Index")

app.include_router(api_router, prefix="/api")
