from fastapi import APIRouter, Depends

from common.deps import get_scanner
from common.dto import ScanResponse
from .barcode_reader import BarcodeScanner
from .service import ScannerService

router = APIRouter()


@router.post("/scan", response_model=ScanResponse)
async def scan_barcode(scanner: BarcodeScanner = Depends(get_scanner)):
    result = await ScannerService(scanner).scan()
    # status: 'scanned' or 'error'; code is None on error
    return ScanResponse(**result)
