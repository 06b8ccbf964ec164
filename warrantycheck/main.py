"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from warrantycheck.config import settings
from warrantycheck.database import create_db_and_tables
from warrantycheck.utils.logging import setup_logging
from warrantycheck.api import auth, panel, warranty, system


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()
    # A missing or malformed WC_ENCRYPTION_KEY aborts startup
    from warrantycheck.services.encryption import get_cipher
    get_cipher()
    yield


app = FastAPI(
    title="Warranty Check",
    description="Peplink InControl warranty expiry reports with one-time code login",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(auth.router)
app.include_router(panel.router)
app.include_router(warranty.router)
app.include_router(system.router)
