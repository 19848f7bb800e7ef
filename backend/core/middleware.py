import logging
import time
import uuid

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)


def install_middleware(app: FastAPI):
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        t0 = time.time()
        resp = await call_next(request)
        dt = time.time() - t0
        resp.headers["X-Request-ID"] = request_id
        # Keep logs short and useful
        logger.info(f"{request.method} {request.url.path} -> {resp.status_code} ({dt * 1000:.1f}ms) [{request_id}]")
        return resp
