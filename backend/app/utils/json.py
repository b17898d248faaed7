from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

import orjson
from fastapi.encoders import jsonable_encoder


def _default(o: Any):
    # Numeric columns come back as Decimal; enums are stored by value
    if isinstance(o, Decimal):
        return float(o)
    if isinstance(o, Enum):
        return o.value
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    raise TypeError(f"Type is not JSON serializable: {type(o).__name__}")


def dumps_bytes(obj: Any) -> bytes:
    return orjson.dumps(obj, option=orjson.OPT_NON_STR_KEYS, default=_default)


def loads(data: str | bytes) -> Any:
    return orjson.loads(data)


def dumps(obj: Any) -> str:
    """Serialize ``obj`` (pydantic models included) to a compact JSON string."""
    return dumps_bytes(jsonable_encoder(obj)).decode("utf-8")
