"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS),
and includes all API routers. The lifespan builds the agent runtime, starts
the heartbeat scheduler and tears everything down on shutdown.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatdock_ai.agent_core.factory import build_runtime
from chatdock_ai.core.logging_config import get_logger, setup_logging

from .api.v1 import capabilities, chat, health, heartbeat, subagents, tools
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .services.runtime import set_runtime

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Startup builds the ``AgentRuntime`` (loading the persisted capability
    state) and starts the heartbeat when enabled. Shutdown stops the
    scheduler, cancels background tasks and closes the backend client.
    """
    logger.info("Starting up ChatDock-AI Server...")
    runtime = build_runtime(settings)
    set_runtime(runtime)
    runtime.heartbeat.start()

    yield

    logger.info("Shutting down ChatDock-AI Server...")
    await runtime.shutdown()
    set_runtime(None)


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    ChatDock-AI Server API

    Local control surface for the ChatDock agent: capability policy and execution
    profiles, background tasks, the proactive heartbeat and a chat endpoint.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(capabilities.router, prefix=f"{constant.API_V1_STR}/capabilities", tags=["capabilities"])
app.include_router(subagents.router, prefix=f"{constant.API_V1_STR}/subagents", tags=["subagents"])
app.include_router(heartbeat.router, prefix=f"{constant.API_V1_STR}/heartbeat", tags=["heartbeat"])
app.include_router(chat.router, prefix=f"{constant.API_V1_STR}/chat", tags=["chat"])
app.include_router(tools.router, prefix=f"{constant.API_V1_STR}/tools", tags=["tools"])
