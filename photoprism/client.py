"""PhotoPrism API client helpers."""

from __future__ import annotations

from typing import Any, Dict, List

import requests

from core.errors import TransportError


API_PREFIX = "/api/v1"
AUTH_HEADER = "X-Auth-Token"


def api_url(base_url: str, endpoint: str) -> str:
    """Join an instance origin and an API endpoint path."""
    return f"{base_url.rstrip('/')}{API_PREFIX}{endpoint}"


def _timeout(timeout_seconds: float) -> float | None:
    if timeout_seconds and timeout_seconds > 0:
        return timeout_seconds
    return None


def photoprism_request(
    session: requests.Session,
    method: str,
    base_url: str,
    endpoint: str,
    token: str,
    *,
    json_body: Dict[str, Any] | None = None,
    allowed_statuses: tuple[int, ...] = (),
    timeout_seconds: float = 0,
) -> requests.Response:
    """Make a PhotoPrism API request.

    Args:
        session: Requests session.
        method: HTTP method.
        base_url: Instance origin, e.g. ``https://photos.example.com``.
        endpoint: API endpoint path below ``/api/v1``.
        token: Session token sent as ``X-Auth-Token``.
        json_body: Optional JSON request body.
        allowed_statuses: Non-2xx statuses that should not raise.
        timeout_seconds: Request timeout; 0 waits indefinitely.

    Returns:
        The response object.

    Raises:
        TransportError: On network failure or a non-2xx status.
    """
    url = api_url(base_url, endpoint)
    headers = {AUTH_HEADER: token}
    try:
        resp = session.request(method, url, headers=headers, json=json_body, timeout=_timeout(timeout_seconds))
    except requests.RequestException as exc:
        raise TransportError(f"{method} {url} failed: {exc}") from exc
    if not resp.ok and resp.status_code not in allowed_statuses:
        raise TransportError(f"API Error: {resp.status_code} - {resp.text}", status_code=resp.status_code)
    return resp


def add_photo_label(
    session: requests.Session,
    base_url: str,
    uid: str,
    label_name: str,
    token: str,
    priority: int = 0,
    timeout_seconds: float = 0,
) -> None:
    """Attach a label (by name) to one photo."""
    photoprism_request(
        session,
        "POST",
        base_url,
        f"/photos/{uid}/label",
        token,
        json_body={"Name": label_name, "Priority": priority},
        timeout_seconds=timeout_seconds,
    )


def remove_photo_label(
    session: requests.Session,
    base_url: str,
    uid: str,
    label_id: int,
    token: str,
    timeout_seconds: float = 0,
) -> None:
    """Detach a label (by ID) from one photo; a 404 means it is already gone."""
    photoprism_request(
        session,
        "DELETE",
        base_url,
        f"/photos/{uid}/label/{label_id}",
        token,
        allowed_statuses=(404,),
        timeout_seconds=timeout_seconds,
    )


def photo_details(
    session: requests.Session,
    base_url: str,
    uid: str,
    token: str,
    timeout_seconds: float = 0,
) -> Dict[str, Any]:
    """Fetch the full detail payload of one photo."""
    resp = photoprism_request(session, "GET", base_url, f"/photos/{uid}", token, timeout_seconds=timeout_seconds)
    try:
        data = resp.json()
    except ValueError as exc:
        raise TransportError(f"Invalid JSON in photo details for {uid}") from exc
    return data if isinstance(data, dict) else {}


def photo_labels(details: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Extract ``{"id", "name", "slug"}`` entries from a photo detail payload.

    PhotoPrism nests each label as ``{"Label": {"ID", "Name", "Slug"}}``;
    flat entries are accepted too.
    """
    labels: List[Dict[str, Any]] = []
    for entry in details.get("Labels") or []:
        if not isinstance(entry, dict):
            continue
        label = entry.get("Label") if isinstance(entry.get("Label"), dict) else entry
        label_id = label.get("ID", label.get("id"))
        if label_id is None:
            continue
        labels.append(
            {
                "id": label_id,
                "name": str(label.get("Name", label.get("name")) or ""),
                "slug": str(label.get("Slug", label.get("slug")) or ""),
            }
        )
    return labels
