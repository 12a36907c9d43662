from contextlib import asynccontextmanager

import requests
from fastapi import FastAPI

from account_status.routers.statuses import router as statuses_router
from account_status.settings import STATUS_API_URL
from account_status.setup_logging import setup_logging

# --------------------------------------------------------------------
# App bootstrap
# --------------------------------------------------------------------
setup_logging() # Init Logging


# --------------------------------------------------------------------
# FastAPI application with lifespan hook
# --------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context runs once at startup and once at shutdown.
    One requests.Session is shared by every run so connections to the
    status service are pooled; each request still gets its own pipeline.
    """
    app.state.http = requests.Session()
    yield
    app.state.http.close()


# Create the FastAPI app instance
app = FastAPI(title="Account Status", lifespan=lifespan)


# --------------------------------------------------------------------
# Routes
# --------------------------------------------------------------------
@app.get("/healthz")
def health():
    """
    Simple health probe for monitoring.
    Does not call the status service.
    """
    return {
        "ok": True,
        "service": "account-status",
        "version": 1,
        "status_api": STATUS_API_URL,
    }

# Register API routers:
app.include_router(statuses_router)
