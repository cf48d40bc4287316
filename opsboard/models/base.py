"""
Opsboard: Shared model base

The REST collaborator speaks camelCase JSON; Python code uses snake_case.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self, **kwargs) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", **kwargs)
