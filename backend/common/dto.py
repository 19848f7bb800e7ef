# common/dto.py
from typing import List, Optional

from pydantic import BaseModel

from core.errors import FieldError


class ErrorOut(BaseModel):
    detail: str
    code: str
    errors: List[FieldError] = []


class HealthOut(BaseModel):
    status: str
    uptime: float


class ScanResponse(BaseModel):
    status: str  # 'scanned' or 'error'
    code: Optional[str] = None
    detail: Optional[str] = None
