"""
Pydantic models for client data.

A client sits in one swimlane (``status``) at a 1‑based ``priority``.
Lane values are validated by the service layer rather than by the
schema so that an unknown lane is reported as ``InvalidStatus`` with
the list of accepted values, the same as the listing filter does.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ClientCreate(BaseModel):
    """Schema for creating a client.  It is appended to its lane."""

    name: str = Field(..., min_length=1, example="Stark, White and Abbott")
    description: Optional[str] = Field(None, example="Cloned Optimal Architecture")
    status: str = Field("backlog", example="backlog")


class ClientUpdate(BaseModel):
    """Schema for moving or reordering a client.

    Both fields are optional.  ``status`` moves the client to another
    lane (last position unless ``priority`` is given); ``priority``
    repositions it within the lane, 1 being the top.
    """

    status: Optional[str] = Field(None, example="in-progress")
    priority: Optional[int] = Field(None, example=1)


class ClientRead(BaseModel):
    """Schema for reading a client from the API."""

    id: int
    name: str
    description: Optional[str] = None
    status: str
    priority: int

    model_config = {
        "from_attributes": True,
    }
