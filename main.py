import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from dotenv import load_dotenv

from timber import Timber
from timber.fastapi import attach
from timber.logging import TimberHandler
from timber.obs.logger import log_event

load_dotenv()

# One client shared by both adapters; configured from TIMBER_* settings
timber = Timber()

logger = logging.getLogger("timber.demo")
logger.setLevel(logging.DEBUG)
logger.addHandler(TimberHandler(timber, level=logging.INFO, default_metadata={"component": "server"}))


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log_event("startup", source_id=timber.source_id, batch_size=timber.batch_size)

    yield

    # Shutdown
    timber.close()
    log_event("shutdown", logged=timber.logged, synced=timber.synced)


app = FastAPI(
    title="Timber demo service",
    version="1.0.0",
    lifespan=lifespan
)


@app.get("/")
async def root():
    return {
        "service": "timber-demo",
        "status": "running",
        "features": [
            "One log entry per HTTP request",
            "stdlib logging forwarded to Timber",
            "Batched background delivery",
        ]
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "timber-demo"}


@app.get("/ping")
async def ping():
    logger.info("ping received", extra={"route": "/ping"})
    return "pong"


@app.get("/unauthorized")
async def unauthorized():
    raise HTTPException(status_code=401, detail="Unauthorized")


@app.get("/internal_error")
async def internal_error():
    logger.error("internal error requested")
    raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/stats")
async def stats():
    return {"logged": timber.logged, "synced": timber.synced}


attach(app, timber)
