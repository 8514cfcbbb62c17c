"""
HTTP listener for incident.io webhooks.

POST /webhook  - incident.io event deliveries
GET  /health   - liveness probe
"""

import json
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from . import __version__
from .errors import SyncError
from .models import IncidentEvent
from .sync import FieldSyncer

logger = logging.getLogger(__name__)


def _error(status_code, message):
    return JSONResponse(status_code=status_code, content={"status": "error", "error": message})


def create_app(settings, syncer=None) -> FastAPI:
    """Build the webhook app. `syncer` defaults to one wired from `settings`."""
    app = FastAPI(title="incident.io to Jira sync", version=__version__)
    app.state.syncer = syncer or FieldSyncer.from_settings(settings)

    if settings.webhook_secret:
        # Signature verification is not implemented; the secret is accepted but unused.
        logger.warning("WEBHOOK_SECRET is set but webhook signatures are not verified.")

    @app.post("/webhook")
    async def webhook(request: Request):
        logger.info(f"Webhook received from {request.client.host if request.client else 'unknown'}")
        body = await request.body()
        try:
            event = IncidentEvent.model_validate(json.loads(body))
        except (ValueError, ValidationError) as e:
            logger.error(f"Failed to decode JSON payload: {e}")
            return _error(400, "Invalid JSON payload")

        logger.info(f"Processing event type: {event.event_type}")
        try:
            # Blocking upstream calls run in the worker threadpool, one worker per request.
            status = await run_in_threadpool(app.state.syncer.handle, event)
        except SyncError as e:
            logger.error(f"Failed to process incident update: {e}")
            return _error(500, "Processing failed")
        except Exception:
            logger.exception(f"Unexpected error processing {event.event_type} event")
            return _error(500, "Processing failed")
        return {"status": status}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app
