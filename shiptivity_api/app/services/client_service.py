"""
Service for listing, creating, moving and removing clients.

Every mutating method runs inside :func:`~shiptivity_api.app.core.db.transaction`,
which holds SQLite's write lock from the first read to the commit.  The
snapshot handed to the rank engine is therefore always fresh and no
other writer can change a lane between the read and the rank writes.
If validation fails, the transaction is rolled back and nothing is
written.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional

from shiptivity_api.app.core.db import get_connection, transaction
from shiptivity_api.app.core.errors import ClientNotFound
from shiptivity_api.app.schemas.client import ClientCreate, ClientRead
from shiptivity_api.app.services.rank_engine import (
    ClientRecord,
    RankUpdate,
    apply_update,
    lane,
    lane_violations,
    validate_status,
)


logger = logging.getLogger(__name__)


class ClientService:
    """Service class for managing clients and their swimlane ranks."""

    @classmethod
    async def list_clients(cls, status: Optional[str] = None) -> List[ClientRead]:
        """Return all clients ordered by status then priority.

        Raises
        ------
        InvalidStatus
            If ``status`` is given and is not a known lane.
        """
        if status is not None:
            validate_status(status)
        conn = get_connection()
        try:
            if status is None:
                rows = conn.execute(
                    "SELECT * FROM clients ORDER BY status, priority, id"
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM clients WHERE status = ? ORDER BY priority, id",
                    (status,),
                ).fetchall()
            return [cls._row_to_client_read(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_client(cls, client_id: int) -> ClientRead:
        """Retrieve a single client.

        Raises
        ------
        ClientNotFound
            If the client does not exist.
        """
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM clients WHERE id = ?", (client_id,)).fetchone()
            if not row:
                raise ClientNotFound(client_id)
            return cls._row_to_client_read(row)
        finally:
            conn.close()

    @classmethod
    async def create_client(cls, data: ClientCreate) -> ClientRead:
        """Insert a client at the bottom of its lane and return it."""
        validate_status(data.status)
        with transaction() as conn:
            size = conn.execute(
                "SELECT COUNT(*) AS total FROM clients WHERE status = ?",
                (data.status,),
            ).fetchone()["total"]
            cursor = conn.execute(
                "INSERT INTO clients (name, description, status, priority) VALUES (?, ?, ?, ?)",
                (data.name, data.description, data.status, size + 1),
            )
            client_id = cursor.lastrowid
            row = conn.execute("SELECT * FROM clients WHERE id = ?", (client_id,)).fetchone()
        logger.info("Created client %s in %s at priority %s", client_id, data.status, size + 1)
        return cls._row_to_client_read(row)

    @classmethod
    async def update_client(
        cls,
        client_id: int,
        status: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> List[ClientRead]:
        """Move and/or reorder a client and return every client afterwards.

        The snapshot is read, ranked and written back in one
        transaction.  Only rows whose status or priority changes are
        written.

        Raises
        ------
        ClientNotFound, InvalidStatus, InvalidPriority
            Propagated from the rank engine; the transaction is rolled
            back and nothing is written.
        """
        try:
            with transaction() as conn:
                snapshot = cls._load_snapshot(conn)
                result = apply_update(snapshot, client_id, status, priority)
                cls._write(conn, result)
        except ValueError as e:
            logger.info(
                "Rejected update of client %s (%s): %s",
                client_id,
                getattr(e, "kind", type(e).__name__),
                e,
            )
            raise
        if result.changed:
            logger.info(
                "Client %s updated: lanes %s, %s row(s) re-ranked",
                client_id,
                ", ".join(result.lanes),
                len(result.writes),
            )
        return [cls._record_to_client_read(r) for r in result.records]

    @classmethod
    async def delete_client(cls, client_id: int) -> None:
        """Remove a client and close the gap it leaves in its lane.

        Raises
        ------
        ClientNotFound
            If the client does not exist.
        """
        with transaction() as conn:
            snapshot = cls._load_snapshot(conn)
            target = next((r for r in snapshot if r.id == client_id), None)
            if target is None:
                raise ClientNotFound(client_id)
            conn.execute("DELETE FROM clients WHERE id = ?", (client_id,))
            remaining = [r for r in lane(snapshot, target.status) if r.id != client_id]
            for position, record in enumerate(remaining, start=1):
                if record.priority != position:
                    conn.execute(
                        "UPDATE clients SET priority = ? WHERE id = ?",
                        (position, record.id),
                    )
        logger.info("Deleted client %s from %s", client_id, target.status)

    @classmethod
    async def check_lanes(cls) -> dict:
        """Return a description of every lane that breaks the 1..N ordering."""
        conn = get_connection()
        try:
            return lane_violations(cls._load_snapshot(conn))
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _load_snapshot(conn: sqlite3.Connection) -> List[ClientRecord]:
        rows = conn.execute(
            "SELECT id, name, description, status, priority FROM clients"
        ).fetchall()
        snapshot = [
            ClientRecord(
                id=row["id"],
                status=row["status"],
                priority=row["priority"],
                name=row["name"],
                description=row["description"],
            )
            for row in rows
        ]
        problems = lane_violations(snapshot)
        if problems:
            logger.warning("Inconsistent lanes in stored snapshot: %s", problems)
        return snapshot

    @staticmethod
    def _write(conn: sqlite3.Connection, result: RankUpdate) -> None:
        conn.executemany(
            "UPDATE clients SET status = ?, priority = ? WHERE id = ?",
            [(status, priority, client_id) for client_id, (status, priority) in result.writes.items()],
        )

    @staticmethod
    def _row_to_client_read(row: sqlite3.Row) -> ClientRead:
        return ClientRead(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            status=row["status"],
            priority=row["priority"],
        )

    @staticmethod
    def _record_to_client_read(record: ClientRecord) -> ClientRead:
        return ClientRead(
            id=record.id,
            name=record.name,
            description=record.description,
            status=record.status,
            priority=record.priority,
        )
