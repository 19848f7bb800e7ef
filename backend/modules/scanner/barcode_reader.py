"""
Barcode Reader Module
Reads scanned codes from a serial (USB/COM) barcode scanner.
"""

import asyncio
import logging
import time
from typing import Optional, Protocol

import serial
import serial.tools.list_ports

from core.errors import ScanError

logger = logging.getLogger(__name__)


class BarcodeScanner(Protocol):
    async def scan(self) -> str:
        """Wait for one scanned code. Raises ScanError when nothing usable arrives."""
        ...


def _candidate_ports(port: Optional[str]) -> list:
    if port:
        return [port]
    return [p.device for p in serial.tools.list_ports.comports()]


def check_barcode_hardware(port: Optional[str] = None, baudrate: int = 9600) -> bool:
    """
    Check if a barcode scanner port can be opened.

    Returns:
        bool: True if a serial port is available, False otherwise
    """
    for device in _candidate_ports(port):
        try:
            ser = serial.Serial(device, baudrate, timeout=0.5)
            ser.close()
            logger.info(f"Found potential barcode scanner on {device}")
            return True
        except (serial.SerialException, OSError):
            continue
    return False


class SerialBarcodeScanner:
    """Hardware scanner that sends one newline-terminated code per trigger"""

    def __init__(self, port: Optional[str] = None, baudrate: int = 9600, timeout: float = 5):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout

    def _open(self) -> serial.Serial:
        last_error = None
        for device in _candidate_ports(self.port):
            try:
                return serial.Serial(device, self.baudrate, timeout=0.1)
            except (serial.SerialException, OSError) as e:
                last_error = e
        if last_error is not None:
            raise ScanError(f"Barcode scanner not available: {last_error}")
        raise ScanError("No barcode scanner connected")

    def read_code(self) -> str:
        """
        Blocking read of a single code.

        Raises:
            ScanError: If no scanner is available or nothing is scanned before the timeout
        """
        logger.info(f"Waiting for barcode ({self.timeout}s timeout)")
        ser = self._open()
        try:
            deadline = time.monotonic() + self.timeout
            while time.monotonic() < deadline:
                line = ser.readline()
                if line:
                    code = line.decode('ascii', errors='ignore').strip()
                    if code:
                        return code
            raise ScanError("No barcode scanned within timeout period")
        except serial.SerialException as e:
            logger.error(f"Barcode reader error: {e}")
            raise ScanError(f"Failed to read barcode: {e}")
        finally:
            ser.close()

    async def scan(self) -> str:
        return await asyncio.to_thread(self.read_code)
