import os
import time
import json
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

# Load environment variables from .env file for local development
from dotenv import load_dotenv
load_dotenv()

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from core.config import settings
from core.middleware import install_middleware
from core.errors import install_handlers
from core.websocket import sio, broadcaster
from common.dto import HealthOut

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

NULL_SENTINELS = {"null", "none", "undefined", "false", "0"}


def _normalize_origin(origin: str) -> Optional[str]:
    sanitized = origin.strip().rstrip('/')
    if not sanitized:
        return None
    if sanitized.lower() in NULL_SENTINELS:
        return None
    return sanitized


def _parse_origins(raw: Optional[str]) -> List[str]:
    """
    Accepts:
      - JSON array: '["https://a.com","https://b.com"]'
      - Comma-separated string: 'https://a.com,https://b.com'
      - Empty / missing -> ['*']
    Never raises; always returns a list[str].
    """
    raw = (raw or '').strip()
    if not raw:
        return ['*']

    if raw.startswith('['):
        try:
            val = json.loads(raw)
            if isinstance(val, list):
                origins = [_normalize_origin(str(x)) for x in val]
                return [o for o in origins if o] or ['*']
        except json.JSONDecodeError as e:
            logger.warning(f"ALLOW_ORIGINS JSON parse error: {e}, falling back to comma-separated")

    origins = [_normalize_origin(p) for p in raw.split(',')]
    return [o for o in origins if o] or ['*']


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    # Stop per-observer delivery tasks on shutdown
    await broadcaster.close()


BOOT_T0 = time.time()
app = FastAPI(
    title='Smart Warehouse API',
    version='1.0.0',
    docs_url='/api/docs',
    openapi_url='/api/openapi.json',
    lifespan=lifespan,
)

# --- CORS --------------------------------------------------------------------
allow_origins = _parse_origins(settings.ALLOW_ORIGINS)
print(f"🌍 CORS origins: {allow_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_origins != ['*'],
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- GZip Compression (for faster data transfer) -----------------------------
app.add_middleware(GZipMiddleware, minimum_size=1000, compresslevel=6)

# --- Middleware & error handlers ---------------------------------------------
install_middleware(app)   # request logging, request-id
install_handlers(app)     # AppError → JSON


# --- Health ------------------------------------------------------------------
@app.get('/api/health', response_model=HealthOut)
def health():
    return {'status': 'ok', 'uptime': round(time.time() - BOOT_T0, 2)}


# --- Router composition (feature-first) --------------------------------------
API = '/api'

from modules.inventory.api import router as inventory_router
from modules.scanner.api import router as scanner_router

app.include_router(inventory_router, prefix=f'{API}/inventory', tags=['inventory'])
app.include_router(scanner_router, prefix=f'{API}/scanner', tags=['scanner'])

fastapi_app = app  # Keep reference for wrapping/testing

# --- WebSocket Integration (After All Middleware) ---------------------------
# Wrap the FastAPI app with Socket.IO for real-time inventory updates
app = socketio.ASGIApp(
    socketio_server=sio,
    other_asgi_app=fastapi_app,
    socketio_path=settings.HUB_PATH,
)
print(f"✅ WebSocket support enabled at /{settings.HUB_PATH}")

if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5055"))
    reload = os.getenv("RELOAD", "false").lower() == "true"

    uvicorn.run("app:app", host=host, port=port, reload=reload)
