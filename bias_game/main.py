from __future__ import annotations

import logging

from fastapi import FastAPI

from bias_game.api.routes import router
from bias_game.assets.startup import init_assets_for_app

app = FastAPI(title="busting-bias", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    init_assets_for_app()
    logger.info({"event": "api_startup"})


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "busting-bias", "version": "0.1.0"}
