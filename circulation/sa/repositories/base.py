# circulation/sa/repositories/base.py
from typing import Optional


def coerce_id(value: object) -> Optional[int]:
    """Turn an incoming identifier into a primary key, or None if it cannot be one.

    Malformed ids are treated the same as unknown ids by every repository.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None
