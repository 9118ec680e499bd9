"""
HTTP API adapter for the Aixo dispatcher.

Architectural role:
- Expose generation, provider discovery, and operator dashboards over HTTP.
- Enforce adapter-level input validation via pydantic request models.
- Delegate all generation work to `aixo.core.dispatcher.Dispatcher`.

Endpoint responsibilities:
- `POST /v1/generate`: snippet-equivalent generation; returns `{"output": ...}`.
- `GET /v1/providers`: registered providers and their availability.
- `GET /widgets/status`: configuration/availability HTML fragment.
- `GET /widgets/usage`: token-usage HTML fragment.

Input validation behavior:
- Missing `prompt` -> HTTP 422 (pydantic validation).
- Blank `prompt` -> HTTP 200 with empty output (template contract).

Error handling strategy:
- Generation failures never surface as HTTP errors; the output is simply empty
  and details go to the operator log.
- Usage dashboard returns HTTP 503 when no usage store is configured.

Side effects:
- Emits debug logs only when `aixo.debug` is enabled.
- Loads `.env` when no dispatcher is passed to `create_app`.
"""

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from aixo.api.snippet import run_snippet
from aixo.api.widgets import render_status, render_usage
from aixo.core.dispatcher import Dispatcher, create_dispatcher


logger = logging.getLogger(__name__)


# ============================================================
# Request Schema
# ============================================================

class GenerateRequest(BaseModel):
    """Snippet-equivalent generation request.

    Only `prompt` is required; unset fields fall back to settings defaults.
    """

    prompt: str
    task: str | None = None
    provider: str | None = None
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    n: int | None = None
    size: str | None = None
    voice: str | None = None
    language: str | None = None
    metadata: Any = None


class GenerateResponse(BaseModel):
    output: str


# ============================================================
# App factory
# ============================================================

def create_app(dispatcher: Dispatcher | None = None) -> FastAPI:
    """Build the FastAPI app around `dispatcher` (default: from environment)."""
    service = dispatcher if dispatcher is not None else create_dispatcher()
    app = FastAPI(title="Aixo")

    @app.post("/v1/generate", response_model=GenerateResponse)
    def generate(request: GenerateRequest):
        properties = request.model_dump(exclude_none=True)

        if service.debug:
            logger.info("Incoming generate request: %r", properties)

        output = run_snippet(service, properties)
        return {"output": output}

    @app.get("/v1/providers")
    def list_providers():
        """Return registered providers as `{key, name, available, default}` entries."""
        default_key = service.settings.default_provider
        return {
            "object": "list",
            "data": [
                {
                    "key": descriptor.key,
                    "name": descriptor.display_name,
                    "available": descriptor.available,
                    "default": descriptor.key == default_key,
                }
                for descriptor in service.describe_providers()
            ],
        }

    @app.get("/widgets/status", response_class=HTMLResponse)
    def status_widget():
        return HTMLResponse(render_status(service))

    @app.get("/widgets/usage", response_class=HTMLResponse)
    def usage_widget():
        if service.usage_store is None:
            return JSONResponse(status_code=503, content={"error": "Usage store is not configured"})
        return HTMLResponse(render_usage(service.usage_store))

    return app
