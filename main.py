"""FastAPI app entry point for Healing Surge Server."""

import logging

from fastapi import FastAPI

from api.admin import router as admin_router
from api.chat import router as chat_router
from auth import load_tokens
from config import FEEDBACK_NAME, LOG_LEVEL, TABLE_FILE, TOKENS_FILE, load_secret
from engine.store import load_table
from models.table import TableState

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Healing Surge Server",
    description="Hit dice and healing surge automation for a virtual tabletop",
    version="0.1.0",
)

load_secret()
load_tokens(TOKENS_FILE)

# Load or create the singleton table
loaded = load_table(TABLE_FILE)
app.state.table = loaded if loaded is not None else TableState()

app.include_router(chat_router, prefix="/chat", tags=["Chat"])
app.include_router(admin_router, prefix="/admin", tags=["Admin"])

logger.info("%s ready.", FEEDBACK_NAME)


@app.get("/")
def root() -> dict:
    """Root endpoint returning server info."""
    return {"name": "Healing Surge Server", "version": "0.1.0", "status": "running"}


@app.get("/health")
def health() -> dict:
    """Health check endpoint."""
    return {"healthy": True}
