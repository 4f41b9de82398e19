"""Request bodies accepted by the portal API.

Fields are optional so that missing values reach the services, which answer
with a 400 and a readable message.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    username: str | None = None
    password: str | None = None


class SelectionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    photo_ids: Any = Field(default=None, alias="photoIds")


class CreateCustomerRequest(BaseModel):
    username: str | None = None
    password: str | None = None
    name: str | None = None


class CreateAlbumRequest(BaseModel):
    customer_id: int | str | None = None
    name: str | None = None
    event_date: str | None = None
