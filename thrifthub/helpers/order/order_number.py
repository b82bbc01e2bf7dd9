import secrets
import string
from datetime import datetime, timezone
from typing import Optional

ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number(now: Optional[datetime] = None) -> str:
    """THB-YYYYMMDD-XXXXXX, six random upper-case alphanumerics."""
    now = now or datetime.now(timezone.utc)
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(6))
    return f"THB-{now:%Y%m%d}-{suffix}"
