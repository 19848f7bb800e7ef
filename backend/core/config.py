from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # CORS – keep env parsing simple: store raw string, parse in app.py
    # This avoids pydantic-settings trying to JSON-decode LIST values and crashing
    # when environment stores comma-separated strings or '*'.
    ALLOW_ORIGINS: Optional[str] = None

    LOG_LEVEL: str = "INFO"

    # Item store used by the server: "memory" or "local" (SQLite via SQLAlchemy)
    INVENTORY_STORE: str = "memory"
    LOCAL_DB_URI: str = "sqlite:///warehouse.db3"

    # Real-time channel
    HUB_PATH: str = "inventoryhub"  # NOTE: ASGIApp prepends '/', so keep this bare
    BROADCAST_EXCLUDE_ORIGINATOR: bool = True

    # Remote access (client side)
    INVENTORY_API_BASE_URL: str = "http://localhost:5055"
    INVENTORY_API_TIMEOUT: float = 30

    # Barcode scanner: "serial", "simulated" or "prompt"
    SCANNER_MODE: str = "simulated"
    SCANNER_PORT: Optional[str] = None
    SCANNER_BAUDRATE: int = 9600
    SCANNER_TIMEOUT: float = 5
    SIMULATED_BARCODE: str = "SKU-MOBILE-999"
    SIMULATED_SCAN_DELAY: float = 2.0

    class Config:
        # Environment variables provided directly - no .env file needed in production
        case_sensitive = False


settings = Settings()
