"""
Client endpoints for API v1.

These routes list clients per swimlane, create and delete clients and
move or reorder a client.  Validation failures raised by the
``ClientService`` propagate as ``RankError`` and are rendered by the
application-wide handler in ``main.py``, whose ``detail`` carries
``kind``, ``message`` and ``long_message``.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from shiptivity_api.app.schemas.client import ClientCreate, ClientRead, ClientUpdate
from shiptivity_api.app.services.client_service import ClientService


router = APIRouter()


@router.get("", response_model=List[ClientRead])
async def list_clients(
    status_filter: Optional[str] = Query(
        None,
        alias="status",
        description="Optional lane filter: 'backlog', 'in-progress' or 'complete'.",
    ),
) -> List[ClientRead]:
    """List all clients ordered by lane, then priority.

    Returns HTTP 400 if ``status`` is not a known lane.
    """
    return await ClientService.list_clients(status=status_filter)


@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client(client_in: ClientCreate) -> ClientRead:
    """Create a client at the lowest priority of its lane."""
    return await ClientService.create_client(client_in)


@router.get("/{client_id}", response_model=ClientRead)
async def get_client(client_id: int) -> ClientRead:
    """Retrieve a single client.  Returns HTTP 404 if it does not exist."""
    return await ClientService.get_client(client_id)


@router.put("/{client_id}", response_model=List[ClientRead])
async def update_client(client_id: int, update: ClientUpdate) -> List[ClientRead]:
    """Move a client to another lane and/or change its priority.

    * ``status`` alone moves the client to the bottom of the new lane.
    * ``priority`` alone reorders the client within its current lane.
    * both move it and then place it at ``priority`` in the new lane.

    Priority 1 is the top of the lane; no two clients in one lane ever
    share a priority.  On success the full, re‑ranked client list is
    returned.
    """
    return await ClientService.update_client(
        client_id,
        status=update.status,
        priority=update.priority,
    )


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: int) -> None:
    """Delete a client and compact the priorities of its lane."""
    await ClientService.delete_client(client_id)
    return None
