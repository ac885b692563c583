#!/usr/bin/env python3
"""
Manage Shiptivity clients directly in the SQLite database.

The tool uses the same service layer as the HTTP API, so moves and
reorders go through the rank engine and are committed in a single
transaction.

Usage:
    python shiptivity_cli.py --db ./clients.db list --status backlog
    python shiptivity_cli.py --db ./clients.db add "Acme Corp" --status in-progress
    python shiptivity_cli.py --db ./clients.db move 7 --status complete --priority 1
    python shiptivity_cli.py --db ./clients.db remove 7
    python shiptivity_cli.py --db ./clients.db check
"""

import argparse
import asyncio
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from shiptivity_api.app.core.config import settings
from shiptivity_api.app.core.db import init_db
from shiptivity_api.app.core.errors import InvalidInput, RankError
from shiptivity_api.app.core.logging_config import setup_logging
from shiptivity_api.app.schemas.client import ClientCreate, ClientRead
from shiptivity_api.app.services.client_service import ClientService
from shiptivity_api.app.services.rank_engine import STATUSES


def print_board(clients: List[ClientRead]) -> None:
    current = None
    for client in clients:
        if client.status != current:
            current = client.status
            print(f"== {current}")
        print(f"  {client.priority:>3}. [{client.id}] {client.name}")


async def run(args: argparse.Namespace) -> int:
    if args.command == "list":
        print_board(await ClientService.list_clients(status=args.status))
    elif args.command == "add":
        try:
            data = ClientCreate(name=args.name, description=args.description, status=args.status)
        except ValidationError as e:
            problems = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
            raise InvalidInput(problems) from e
        client = await ClientService.create_client(data)
        print(f"[+] Client {client.id} added to {client.status} at priority {client.priority}")
    elif args.command == "move":
        if args.status is None and args.priority is None:
            print("[!] Nothing to do: give --status and/or --priority.", file=sys.stderr)
            return 2
        clients = await ClientService.update_client(args.id, status=args.status, priority=args.priority)
        print_board(clients)
    elif args.command == "remove":
        await ClientService.delete_client(args.id)
        print(f"[+] Client {args.id} removed")
    elif args.command == "check":
        problems = await ClientService.check_lanes()
        if problems:
            for status, problem in problems.items():
                print(f"[!] {status}: {problem}", file=sys.stderr)
            return 1
        print("[+] All lanes are contiguous")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Manage Shiptivity clients (SQLite).")
    ap.add_argument("--db", default=os.getenv("DATABASE_URL", "clients.db"), help="Path to SQLite DB file")
    ap.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    sub = ap.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="Print clients grouped by lane")
    p_list.add_argument("--status", help="Only show one lane")

    p_add = sub.add_parser("add", help="Append a new client to a lane")
    p_add.add_argument("name")
    p_add.add_argument("--status", default="backlog", help=f"One of {', '.join(STATUSES)}")
    p_add.add_argument("--description")

    p_move = sub.add_parser("move", help="Move and/or reorder a client")
    p_move.add_argument("id", type=int)
    p_move.add_argument("--status", help="Destination lane")
    p_move.add_argument("--priority", type=int, help="New 1-based priority within the lane")

    p_remove = sub.add_parser("remove", help="Delete a client and compact its lane")
    p_remove.add_argument("id", type=int)

    sub.add_parser("check", help="Verify every lane is ranked 1..N")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, force=True)
    settings.database_url = os.path.abspath(args.db)
    init_db()
    try:
        return asyncio.run(run(args))
    except RankError as e:
        print(f"[!] {e.long_message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
