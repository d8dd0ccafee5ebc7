from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

try:
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
except Exception:  # pragma: no cover - optional dependency resolution
    FastAPIInstrumentor = None

from apps.api.observability import init_observability
from apps.api.routes.schedule import router as schedule_router
from packages.core.logging_config import configure_logging


configure_logging()

tracing = init_observability()
app = FastAPI(title="Unified Schedule API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
if tracing and FastAPIInstrumentor is not None:
    FastAPIInstrumentor.instrument_app(app)
elif tracing:
    logging.getLogger("unified_schedule.api").warning(
        "OpenTelemetry FastAPI instrumentation not available."
    )
app.include_router(schedule_router)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
