"""Human-readable order numbers."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Optional


def generate_order_number(now: Optional[datetime] = None) -> str:
    """Generate an order number: ``ORD-YYYYMMDD-XXXXXX``."""
    now = now or datetime.now(timezone.utc)
    suffix = secrets.token_hex(3).upper()
    return f"ORD-{now:%Y%m%d}-{suffix}"
