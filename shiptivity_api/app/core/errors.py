"""
Error kinds raised by the client services.

Every error carries a machine‑checkable ``kind`` together with a short
``message`` and a human‑readable ``long_message``, the same pair of
fields the API has always returned in its error bodies.  The classes
derive from ``ValueError`` so callers that only care about "bad
request" can keep catching ``ValueError``.
"""

from typing import Dict


class RankError(ValueError):
    """Base class for validation failures surfaced to API callers."""

    kind = "Error"
    status_code = 400
    message = "Invalid request."

    def __init__(self, long_message: str) -> None:
        super().__init__(long_message)
        self.long_message = long_message

    def to_dict(self) -> Dict[str, str]:
        return {
            "kind": self.kind,
            "message": self.message,
            "long_message": self.long_message,
        }


class ClientNotFound(RankError):
    kind = "NotFound"
    status_code = 404
    message = "Invalid id provided."

    def __init__(self, client_id: int) -> None:
        super().__init__(f"Cannot find client with id {client_id}.")
        self.client_id = client_id


class InvalidStatus(RankError):
    kind = "InvalidStatus"
    message = "Invalid status provided."

    def __init__(self, status: str) -> None:
        super().__init__(
            "Status can only be one of the following: [backlog | in-progress | complete]."
        )
        self.status = status


class InvalidPriority(RankError):
    """Requested priority outside ``[1, upper]`` for its lane."""

    kind = "InvalidPriority"
    message = "Invalid priority."

    def __init__(self, priority: int, upper: int) -> None:
        super().__init__(f"Priority must be between 1 and {upper}.")
        self.priority = priority
        self.upper = upper


class InvalidInput(RankError):
    """Raw input could not be parsed into the expected types."""

    kind = "InvalidInput"
    message = "Invalid input provided."
