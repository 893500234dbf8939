"""
Comment Canvas FastAPI Application

Main entry point for the exhibit server: guest comment API, photo catalog,
SSE comment stream and the WebSocket host display sessions.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables before the database module reads DATABASE_URL
load_dotenv()

from fastapi import FastAPI  # noqa: E402
from loguru import logger  # noqa: E402

from database import SqlCommentStore, init_db  # noqa: E402
from logic.logging_setup import configure_logger  # noqa: E402
from server.comments import router as comments_router  # noqa: E402
from server.routes import router as routes_router  # noqa: E402
from server.sync import router as sync_router  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logger("server")
    if getattr(app.state, "store", None) is None:
        init_db()
        app.state.store = SqlCommentStore()
    logger.info("Comment store ready")
    yield


def create_app(store=None) -> FastAPI:
    """Create and configure the FastAPI app.

    Args:
        store: Comment store to use; a SqlCommentStore is created at startup
            when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(title="Comment Canvas", lifespan=lifespan)
    app.state.store = store

    # Include all routers
    app.include_router(routes_router)
    app.include_router(comments_router)
    app.include_router(sync_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
