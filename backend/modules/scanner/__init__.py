"""
Barcode scanning for inventory clients.
"""

from .barcode_reader import BarcodeScanner, SerialBarcodeScanner, check_barcode_hardware
from .simulated import SimulatedBarcodeScanner, PromptBarcodeScanner
from .service import get_scanner, ScannerService

__all__ = [
    'BarcodeScanner',
    'SerialBarcodeScanner',
    'check_barcode_hardware',
    'SimulatedBarcodeScanner',
    'PromptBarcodeScanner',
    'get_scanner',
    'ScannerService',
]
