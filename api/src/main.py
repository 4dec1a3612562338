import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.src.config import get_settings
from api.src.db.database import init_db
from api.src.routes import (
    health_router,
    executions_router,
    pipelines_router,
    repos_router,
    webhooks_router,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Pulse API")
    await init_db()
    yield
    # Shutdown
    logger.info("Shutting down Pulse API")

app = FastAPI(
    title="Pulse",
    description="Git-triggered CI/CD pipeline runner",
    version="0.1.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health_router)
app.include_router(executions_router, prefix="/api")
app.include_router(pipelines_router, prefix="/api")
app.include_router(repos_router, prefix="/api")
app.include_router(webhooks_router, prefix="/api")

@app.get("/")
async def root():
    return {
        "name": "Pulse",
        "version": "0.1.0",
        "docs": "/docs"
    }

def run():
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)

if __name__ == "__main__":
    run()
