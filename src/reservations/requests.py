"""
Request translator for the reservations REST backend.

Maps validated inputs onto PostgREST requests: method, target URL with
column=eq.value filters, credential headers and JSON body. Nothing here
touches the network.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

from .schemas import (
    CreateReservationInput,
    DeleteReservationInput,
    LookupReservationInput,
    UpdateReservationInput,
)
from .settings import BackendSettings

RESERVATIONS_ENDPOINT = "reservations"
REST_PREFIX = "rest/v1"

RETURN_REPRESENTATION = "return=representation"

# Characters encodeURIComponent leaves untouched besides alphanumerics and -_.~
_URI_COMPONENT_SAFE = "!*'()"


@dataclass(frozen=True)
class BackendRequest:
    """Fully formed HTTP request descriptor."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Any] = None

    def content(self) -> Optional[bytes]:
        """JSON-encoded body, or None when the request has no body."""
        if self.body is None:
            return None
        return json.dumps(self.body, separators=(",", ":")).encode("utf-8")


def encode_component(value: str) -> str:
    """Percent-encode a value the way encodeURIComponent does."""
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


def eq_filter(column: str, value: str) -> str:
    """Equality predicate in PostgREST query syntax."""
    return f"{column}=eq.{encode_component(value)}"


def locating_filters(mobile: str, name: str) -> List[str]:
    """Filters matching the (mobile, name) locating pair."""
    return [eq_filter("mobile", mobile), eq_filter("name", name)]


def build_request(
    settings: BackendSettings,
    method: str,
    query: Optional[List[str]] = None,
    body: Optional[Any] = None,
    prefer: Optional[List[str]] = None,
) -> BackendRequest:
    """
    Build a request against the reservations resource.

    Args:
        settings: Backend connection settings
        method: HTTP method
        query: Already-encoded query parameters, joined with '&'
        body: JSON-serializable body
        prefer: Values for the Prefer header

    Returns:
        Request descriptor

    Raises:
        ConfigurationError: If the URL or API key is missing
    """
    checked = settings.require()

    url = f"{checked.url}/{REST_PREFIX}/{RESERVATIONS_ENDPOINT}"
    if query:
        url = f"{url}?{'&'.join(query)}"

    headers = {
        "apikey": checked.api_key,
        "Authorization": f"Bearer {checked.api_key}",
        "Accept": "application/json",
    }
    if body is not None:
        headers["Content-Type"] = "application/json"
    if prefer:
        headers["Prefer"] = ",".join(prefer)

    return BackendRequest(method=method, url=url, headers=headers, body=body)


def build_create_request(
    settings: BackendSettings, payload: CreateReservationInput
) -> BackendRequest:
    """POST a single-row insert and ask for the created row back."""
    return build_request(
        settings,
        "POST",
        body=[payload.to_record()],
        prefer=[RETURN_REPRESENTATION],
    )


def build_update_request(
    settings: BackendSettings, payload: UpdateReservationInput
) -> BackendRequest:
    """PATCH the rows matching the current locating pair with the changed fields only."""
    return build_request(
        settings,
        "PATCH",
        query=locating_filters(payload.mobile, payload.name),
        body=payload.to_changes(),
        prefer=[RETURN_REPRESENTATION],
    )


def build_delete_request(
    settings: BackendSettings, payload: DeleteReservationInput
) -> BackendRequest:
    """DELETE the rows matching the locating pair and ask for them back."""
    return build_request(
        settings,
        "DELETE",
        query=locating_filters(payload.mobile, payload.name),
        prefer=[RETURN_REPRESENTATION],
    )


def build_lookup_request(
    settings: BackendSettings, payload: LookupReservationInput
) -> BackendRequest:
    """GET every column of the rows matching the locating pair and optional date/time."""
    query = ["select=*"] + locating_filters(payload.mobile, payload.name)
    if payload.date is not None:
        query.append(eq_filter("date", payload.date))
    if payload.time is not None:
        query.append(eq_filter("time", payload.time))

    return build_request(settings, "GET", query=query)


def query_predicates(url: str) -> List[Tuple[str, str]]:
    """Split a built URL's query string into (column, predicate) pairs."""
    if "?" not in url:
        return []
    pairs = []
    for part in url.split("?", 1)[1].split("&"):
        column, _, predicate = part.partition("=")
        pairs.append((column, predicate))
    return pairs
