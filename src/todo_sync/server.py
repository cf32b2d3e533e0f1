"""HTTP endpoint receiving Todoist webhook deliveries."""

import json
import logging

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from todo_sync import __version__
from todo_sync.errors import InvalidEventError
from todo_sync.sync.engine import SyncEngine
from todo_sync.sync.events import SIGNATURE_HEADER, WebhookEvent, parse_event, verify_signature

logger = logging.getLogger(__name__)


def create_app(engine: SyncEngine, webhook_secret: str | None = None) -> FastAPI:
    """Build the webhook application.

    Args:
        engine: Sync engine that applies the events.
        webhook_secret: Todoist app client secret. When set, deliveries
            without a matching signature are refused.

    Returns:
        FastAPI application.
    """
    app = FastAPI(title="todo-sync", version=__version__)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/todo/sync")
    async def handle_webhook(request: Request) -> JSONResponse:
        body = await request.body()
        try:
            if webhook_secret:
                verify_signature(body, request.headers.get(SIGNATURE_HEADER), webhook_secret)
        except InvalidEventError as e:
            logger.warning(f"Rejected webhook delivery: {e}")
            return JSONResponse(status_code=401, content={"detail": str(e)})

        try:
            event = parse_event(json.loads(body))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Rejected webhook delivery with invalid JSON: {e}")
            return JSONResponse(status_code=400, content={"detail": "Body is not valid JSON"})
        except InvalidEventError as e:
            logger.warning(f"Rejected webhook delivery: {e}")
            return JSONResponse(status_code=400, content={"detail": str(e)})

        return await _apply_event(engine, event)

    return app


async def _apply_event(engine: SyncEngine, event: WebhookEvent) -> JSONResponse:
    """Apply an event on a worker thread; the engine blocks on network and disk."""
    try:
        outcome = await run_in_threadpool(engine.apply_remote_event, event)
    except Exception as e:
        logger.error(
            f"Error processing {event.event_name} for remote task {event.remote_task_id}: {e}",
            exc_info=True,
        )
        return JSONResponse(status_code=500, content={"detail": str(e)})

    content = outcome.task.to_api_dict() if outcome.task else None
    return JSONResponse(status_code=200, content=content)
