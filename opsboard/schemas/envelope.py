"""
Opsboard: Write response envelope

POST /users answers {data, tempPassword?}; the password is shown once.
"""
from typing import Generic, TypeVar

from pydantic import BaseModel

from opsboard.models.base import WireModel

ModelT = TypeVar("ModelT", bound=BaseModel)


class Created(WireModel, Generic[ModelT]):
    data: ModelT
    temp_password: str | None = None
