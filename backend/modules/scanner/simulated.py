"""
Scanners for environments without scanning hardware.
"""
import asyncio
import logging
from typing import Callable

from core.errors import ScanError

logger = logging.getLogger(__name__)


class SimulatedBarcodeScanner:
    """Mobile simulation: waits, then returns a fixed code"""

    def __init__(self, code: str = "SKU-MOBILE-999", delay: float = 2.0):
        self.code = code
        self.delay = delay

    async def scan(self) -> str:
        await asyncio.sleep(self.delay)
        return self.code


class PromptBarcodeScanner:
    """Web simulation: asks the user to type the scanned code"""

    def __init__(self, prompt: str = "📷 (Simulation) Scan barcode: ", input_func: Callable[[str], str] = input):
        self.prompt = prompt
        self.input_func = input_func

    def _ask(self) -> str:
        try:
            answer = self.input_func(self.prompt)
        except EOFError:
            raise ScanError("Scan cancelled")
        if answer is None or not answer.strip():
            raise ScanError("Scan cancelled")
        return answer.strip()

    async def scan(self) -> str:
        return await asyncio.to_thread(self._ask)
