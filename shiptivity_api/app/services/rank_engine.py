"""
Rank engine for client swimlanes.

Clients live in one of three lanes (``backlog``, ``in-progress``,
``complete``) and carry a 1‑based ``priority`` giving their position
within that lane.  After every update the priorities of each lane must
be exactly ``1..N`` with no gaps and no duplicates.

:func:`apply_update` is a pure function over a snapshot: it never
touches the database.  It validates the request, works on copies of
the records and reports only the (status, priority) pairs that
actually change, so a failed validation leaves nothing half‑applied.
Persisting the writes atomically is the caller's job
(see :class:`~shiptivity_api.app.services.client_service.ClientService`).
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple

from shiptivity_api.app.core.errors import ClientNotFound, InvalidPriority, InvalidStatus


STATUSES: Tuple[str, ...] = ("backlog", "in-progress", "complete")


@dataclass
class ClientRecord:
    """A client row as seen by the rank engine."""

    id: int
    status: str
    priority: int
    name: str = ""
    description: Optional[str] = None


@dataclass
class RankUpdate:
    """Outcome of :func:`apply_update`.

    ``writes`` maps client id to its new ``(status, priority)``; it is
    empty for a no‑op.  ``records`` is the full snapshot after the
    update, ordered by status then priority.
    """

    records: List[ClientRecord]
    writes: Dict[int, Tuple[str, int]] = field(default_factory=dict)
    lanes: Tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.writes)


def validate_status(status: str) -> str:
    if status not in STATUSES:
        raise InvalidStatus(status)
    return status


def presentation_order(records: Iterable[ClientRecord]) -> List[ClientRecord]:
    """Sort records by status, then priority (ties broken by id)."""
    return sorted(records, key=lambda r: (r.status, r.priority, r.id))


def lane(records: Iterable[ClientRecord], status: str) -> List[ClientRecord]:
    """Return the records of one lane in rank order."""
    return sorted(
        (r for r in records if r.status == status),
        key=lambda r: (r.priority, r.id),
    )


def lane_violations(records: Iterable[ClientRecord]) -> Dict[str, str]:
    """Describe every lane whose priorities are not exactly ``1..N``.

    Returns an empty dict when all lanes are consistent.
    """
    by_status: Dict[str, List[int]] = {}
    for record in records:
        by_status.setdefault(record.status, []).append(record.priority)

    problems: Dict[str, str] = {}
    for status, priorities in sorted(by_status.items()):
        expected = set(range(1, len(priorities) + 1))
        counts = Counter(priorities)
        duplicates = sorted(p for p, n in counts.items() if n > 1)
        missing = sorted(expected - set(priorities))
        unexpected = sorted(set(priorities) - expected)
        parts = []
        if duplicates:
            parts.append(f"duplicate {duplicates}")
        if missing:
            parts.append(f"missing {missing}")
        if unexpected:
            parts.append(f"out of range {unexpected}")
        if parts:
            problems[status] = ", ".join(parts)
    return problems


def apply_update(
    records: Iterable[ClientRecord],
    target_id: int,
    new_status: Optional[str] = None,
    new_priority: Optional[int] = None,
) -> RankUpdate:
    """Move and/or reorder one client, keeping every lane contiguous.

    Parameters
    ----------
    records : Iterable[ClientRecord]
        Full snapshot of all clients.  Not modified.
    target_id : int
        Identifier of the client being updated.
    new_status : Optional[str]
        Destination lane.  A client moved to another lane is placed
        last in it unless ``new_priority`` is also given.
    new_priority : Optional[int]
        Desired 1‑based rank within the (possibly new) lane.

    Returns
    -------
    RankUpdate
        The resulting snapshot and the minimal set of writes.

    Raises
    ------
    ClientNotFound
        If ``target_id`` is not in the snapshot.
    InvalidStatus
        If ``new_status`` is not a known lane.
    InvalidPriority
        If ``new_priority`` is outside ``1..lane size + 1``, where the
        lane size excludes the target itself.
    """
    snapshot = [replace(r) for r in records]
    original = {r.id: (r.status, r.priority) for r in snapshot}

    target = next((r for r in snapshot if r.id == target_id), None)
    if target is None:
        raise ClientNotFound(target_id)
    if new_status is not None:
        validate_status(new_status)

    old_status = target.status
    moving = new_status is not None and new_status != old_status
    if not moving and new_priority is None:
        return RankUpdate(records=presentation_order(snapshot))

    dest_status = new_status if moving else old_status
    others = [r for r in lane(snapshot, dest_status) if r.id != target_id]
    if new_priority is None:
        sequence = others + [target]
    else:
        upper = len(others) + 1
        if not 1 <= new_priority <= upper:
            raise InvalidPriority(new_priority, upper)
        sequence = others[:]
        sequence.insert(new_priority - 1, target)

    touched = [dest_status]
    if moving:
        remaining = [r for r in lane(snapshot, old_status) if r.id != target_id]
        _rerank(remaining)
        touched.insert(0, old_status)
        target.status = dest_status
    _rerank(sequence)

    writes = {
        r.id: (r.status, r.priority)
        for r in snapshot
        if (r.status, r.priority) != original[r.id]
    }
    return RankUpdate(
        records=presentation_order(snapshot),
        writes=writes,
        lanes=tuple(touched),
    )


def _rerank(sequence: List[ClientRecord]) -> None:
    for position, record in enumerate(sequence, start=1):
        record.priority = position
