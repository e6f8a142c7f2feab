"""Pydantic request/response schemas used by the API.

Request bodies only describe shape; string rules (trimming, the 100 byte
limit, status tokens) are enforced by the services so the same checks
apply however a call arrives.
"""

import uuid
from typing import Optional

from pydantic import BaseModel


class CreateStoryBody(BaseModel):
    """POST body for creating a story. `owner` defaults to the backlog."""
    name: str
    owner: Optional[str] = None


class UpdateStoryBody(BaseModel):
    """PATCH body for a story; omitted fields are left unchanged."""
    name: Optional[str] = None
    owner: Optional[str] = None


class CreateTaskBody(BaseModel):
    """POST body for creating a task under an existing story."""
    story_id: uuid.UUID
    name: str


class UpdateTaskBody(BaseModel):
    """PATCH body for a task; `status` is `incomplete` or `complete`."""
    name: Optional[str] = None
    status: Optional[str] = None


class ErrorOut(BaseModel):
    """Error response body."""
    error: str
    message: str
