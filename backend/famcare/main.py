import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from famcare.api.router import api_router
from famcare.core.config import get_settings
from famcare.core.db import init_db
from famcare.core.errors import handle_unexpected, install_error_handlers
from famcare.core.logger import (
    REQUEST_ID_HEADER,
    bind_request_id,
    configure_logging,
    reset_request_id,
    resolve_request_id,
)

settings = get_settings()
configure_logging(settings.log_level)
log = logging.getLogger("famcare.access")


@asynccontextmanager
async def lifespan(_: FastAPI):
    await init_db()
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
install_error_handlers(app)
app.include_router(api_router)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = resolve_request_id(request.headers)
    token = bind_request_id(request_id)
    started = time.perf_counter()
    try:
        try:
            response = await call_next(request)
        except Exception as exc:
            # Rendered here so the envelope and the traceback log keep the request id.
            response = await handle_unexpected(request, exc)
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        log.info(
            "request served",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response
    finally:
        reset_request_id(token)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
