from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from core.config import settings
from core.errors import ScanError
from .barcode_reader import BarcodeScanner, SerialBarcodeScanner
from .simulated import PromptBarcodeScanner, SimulatedBarcodeScanner

logger = logging.getLogger(__name__)


def get_scanner(mode: Optional[str] = None) -> BarcodeScanner:
    """Pick the scanner implementation for this host (SCANNER_MODE)"""
    mode = (mode or settings.SCANNER_MODE).lower()
    if mode == "serial":
        return SerialBarcodeScanner(
            port=settings.SCANNER_PORT,
            baudrate=settings.SCANNER_BAUDRATE,
            timeout=settings.SCANNER_TIMEOUT,
        )
    if mode == "simulated":
        return SimulatedBarcodeScanner(code=settings.SIMULATED_BARCODE, delay=settings.SIMULATED_SCAN_DELAY)
    if mode == "prompt":
        return PromptBarcodeScanner()
    raise ValueError(f"Unknown SCANNER_MODE: {mode!r} (expected 'serial', 'simulated' or 'prompt')")


class ScannerService:
    def __init__(self, scanner: BarcodeScanner):
        self.scanner = scanner

    async def scan(self) -> Dict[str, Any]:
        try:
            code = await self.scanner.scan()
        except ScanError as e:
            # Scanner present but scan failed or was cancelled: client shows a retry prompt
            logger.info(f"Scan failed: {e.message}")
            return {"status": "error", "code": None, "detail": e.message}
        return {"status": "scanned", "code": code}
