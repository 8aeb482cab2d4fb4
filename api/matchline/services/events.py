import uuid
from typing import Any

from sqlalchemy import insert

from ..models import ProductEvent


def log_product_event(
    db,
    *,
    event_name: str,
    user_id: str | None = None,
    properties: dict[str, Any] | None = None,
) -> None:
    properties = properties or {}
    db.execute(
        insert(ProductEvent).values(
            id=str(uuid.uuid4()),
            user_id=user_id,
            event_name=event_name,
            properties=properties,
        )
    )
