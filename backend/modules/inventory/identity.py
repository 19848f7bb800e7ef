"""
Identity assignment for inventory items.
"""
from __future__ import annotations
import uuid
from typing import Optional

from .models import EMPTY_ID


def is_empty_identity(item_id: Optional[uuid.UUID]) -> bool:
    return item_id is None or item_id == EMPTY_ID


def ensure_identity(item_id: Optional[uuid.UUID]) -> uuid.UUID:
    """
    Return `item_id` unchanged when it is set, otherwise a fresh random
    128-bit identifier (uuid4).
    """
    if is_empty_identity(item_id):
        return uuid.uuid4()
    return item_id
