"""Success envelopes — ``{"success": true, "message": ..., "data": ...}``."""

from typing import Any, Iterable

from pydantic import BaseModel

from carwash.schemas.common import PageMeta


def success(data: Any = None, message: str = "Success") -> dict:
    return {"success": True, "message": message, "data": data}


def paginated(
    items: Iterable[Any],
    meta: PageMeta,
    schema: type[BaseModel],
    message: str = "Success",
) -> dict:
    return {
        "success": True,
        "message": message,
        "data": [schema.model_validate(item) for item in items],
        "meta": meta,
    }
