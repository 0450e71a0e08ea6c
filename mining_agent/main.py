from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mining_agent.api.routes import mining_agent
from mining_agent.config import settings
from mining_agent.services.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Mining agent API starting")
    yield
    logger.info("Mining agent API stopped")


app = FastAPI(
    title="Mining Agent",
    description="Collects mining technical reports and extracts structured project data",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(mining_agent.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "mining-agent"}
