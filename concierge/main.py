"""
FastAPI application entry point.

Assembles the FastAPI app with the chat router.
"""

import logging
import os
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from concierge.agents.registry import AGENT_CLASSES
from concierge.graph.chat_api import router as chat_router
from concierge.shared.logging import setup_logging


# ============================================================================
# Logging configuration (single source of truth for all agents)
# ============================================================================
LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s"
)

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True,  # Override any prior basicConfig calls
)

# Quiet noisy third-party loggers
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)

# JSON lines for the package logger when requested (e.g. for log shipping)
if os.getenv("CONCIERGE_LOG_FORMAT", "text").lower() == "json":
    setup_logging()


# Create FastAPI app
app = FastAPI(
    title="Concierge",
    description="Multi-agent restaurant reservation assistant built with LangGraph",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(chat_router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Concierge",
        "version": "0.1.0",
        "endpoints": "/api/chat",
        "agents": {
            agent_cls.name: {
                "status": "active",
                "description": agent_cls.description,
                "tools": list(agent_cls.allowed_tools),
            }
            for agent_cls in AGENT_CLASSES
        },
    }


@app.get("/health")
async def health():
    """Global health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
