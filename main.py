from __future__ import annotations

import logging
import time as _t

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from routers import (
    events as events_router,
    candidates as candidates_router,
)

app = FastAPI(title="hackmatch-api", version="1.0.0")

# CORS (adjust origins as needed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_log = logging.getLogger("uvicorn.error")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = _t.perf_counter()  # monotonic for durations
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        dur_ms = int((_t.perf_counter() - start) * 1000)
        status = getattr(response, "status_code", "-")
        _log.info(
            "path=%s status=%s dur_ms=%s",
            request.url.path,
            status,
            dur_ms,
        )

# Routers
app.include_router(events_router.router)
app.include_router(candidates_router.router)


@app.get("/ping")
def ping():
    return {"ok": True, "ts": _t.time()}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/")
def root():
    return {"ok": True, "service": "hackmatch-api"}
