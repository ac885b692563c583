"""Shiptivity API client.

A thin wrapper around the ``/api/v1/clients`` routes built on the
``requests`` library.  Every method returns a tuple ``(data, error)``:
on success ``error`` is ``None``; on failure ``data`` is empty and
``error`` is a dictionary with keys ``status_code``, ``kind`` and
``message`` taken from the API's error body.

The client exposes:

* :meth:`list_clients` – all clients, optionally one lane only.
* :meth:`get_client` – a single client by id.
* :meth:`create_client` – append a new client to a lane.
* :meth:`update_client` – move and/or reorder a client.
* :meth:`delete_client` – remove a client.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Error = Dict[str, Any]


class ShiptivityAPI:
    """Client for interacting with the Shiptivity API."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:3001``.
            timeout: Seconds to wait for each response.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Tuple[Optional[Any], Optional[Error]]:
        """Perform an HTTP request against ``/api/v1``.

        Returns:
            A tuple ``(data, error)``.  ``data`` contains the parsed JSON
            response on success (``None`` for empty bodies).
        """
        url = f"{self.base_url}/api/v1{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            return None, self._error_from_response(exc)
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "kind": None, "message": str(exc)}

    @staticmethod
    def _error_from_response(exc: requests.HTTPError) -> Error:
        response = exc.response
        status = response.status_code if response is not None else None
        kind = None
        message = ""
        if response is not None:
            try:
                body = response.json()
            except ValueError:
                message = response.text
            else:
                detail = body.get("detail", body) if isinstance(body, dict) else body
                if isinstance(detail, dict):
                    kind = detail.get("kind")
                    message = detail.get("long_message") or detail.get("message") or ""
                else:
                    message = str(detail)
        if not message:
            message = str(exc)
        logger.error("API request failed (%s): %s", status, message)
        return {"status_code": status, "kind": kind, "message": message}

    # ------------------------------------------------------------------
    # Client operations
    # ------------------------------------------------------------------
    def list_clients(self, status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """Retrieve clients ordered by lane and priority."""
        params = {"status": status} if status else None
        data, error = self._request("GET", "/clients", params=params)
        if error:
            return [], error
        return data or [], None

    def get_client(self, client_id: int) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("GET", f"/clients/{client_id}")

    def create_client(
        self,
        name: str,
        status: str = "backlog",
        description: Optional[str] = None,
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        payload = {"name": name, "status": status, "description": description}
        return self._request("POST", "/clients", json_body=payload)

    def update_client(
        self,
        client_id: int,
        status: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """Move and/or reorder a client.

        Only the fields that are given are sent.  Returns the full client
        list after the update.
        """
        payload: Dict[str, Any] = {}
        if status is not None:
            payload["status"] = status
        if priority is not None:
            payload["priority"] = priority
        data, error = self._request("PUT", f"/clients/{client_id}", json_body=payload)
        if error:
            return [], error
        return data or [], None

    def delete_client(self, client_id: int) -> Tuple[bool, Optional[Error]]:
        _, error = self._request("DELETE", f"/clients/{client_id}")
        return error is None, error
