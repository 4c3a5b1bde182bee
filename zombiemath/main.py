from fastapi import FastAPI
import logging

from zombiemath.api.routes import router
from zombiemath.infra.redis_client import get_redis_url

app = FastAPI(title="zombiemath", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    logger.info("leaderboard backed by redis at %s", get_redis_url())


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "zombiemath", "version": "0.1.0"}
