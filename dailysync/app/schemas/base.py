from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Wire models use camelCase keys; attributes stay snake_case so they map
    straight onto the ORM columns.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def dump(self, **kwargs) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", **kwargs)


class ORMBase(ApiModel):
    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


def reject_null(value):
    """
    Merge-patch helper: a key may be omitted, but a required column can't be
    explicitly set to null.
    """
    if value is None:
        raise ValueError("may not be null")
    return value
