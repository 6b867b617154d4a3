"""rentledger FastAPI application entry point."""

import argparse
import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from rentledger.api.errors import register_error_handlers
from rentledger.api.routes import invoices, payments
from rentledger.config import settings
from rentledger.models import Base
from rentledger.services import engine
from rentledger.services.logging import setup_server_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    # Startup: Initialize database tables (Alembic owns schema changes)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialized")
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title=settings.api_title,
    description="Rental billing and outstanding-balance reconciliation",
    version=settings.api_version,
    lifespan=lifespan,
)

register_error_handlers(app)

# Include routers
app.include_router(invoices.router)
app.include_router(payments.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


def main():
    """Main entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(description="rentledger API server")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    args = parser.parse_args()

    setup_server_logging()
    logger.info(f"Starting Uvicorn server on {args.host}:{args.port}...")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
