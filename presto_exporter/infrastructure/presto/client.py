"""HTTP access to the Presto status API plus decoding into domain models."""

from __future__ import annotations

import json
from urllib.parse import urlsplit

import requests
from pydantic import TypeAdapter, ValidationError

from presto_exporter.core.errors import ConfigurationError, DecodeError, FetchError
from presto_exporter.domain.models import ClusterSnapshot, QueryRecord

CLUSTER_PATH = "/v1/cluster"
QUERY_PATH = "/v1/query"

_QUERY_LIST = TypeAdapter(list[QueryRecord])


class PrestoStatsClient:
    """Issues a timed GET against one fixed Presto endpoint.

    The request is prepared once at construction so a malformed base URL
    surfaces as ConfigurationError before any loop starts.
    """

    def __init__(
        self,
        base_url: str,
        path: str,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ):
        self.url = f"{base_url.rstrip('/')}{path}"
        self.timeout = timeout
        try:
            parts = urlsplit(self.url)
        except ValueError as exc:
            raise ConfigurationError(
                f"failed to create get request to {self.url}: {exc}"
            ) from exc
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(f"failed to create get request to {self.url}")
        self._owns_session = session is None
        self.session = session or requests.Session()
        try:
            self._request = self.session.prepare_request(
                requests.Request("GET", self.url, headers={"Accept": "application/json"})
            )
        except requests.RequestException as exc:
            raise ConfigurationError(
                f"failed to create get request to {self.url}: {exc}"
            ) from exc

    def fetch(self) -> bytes:
        try:
            resp = self.session.send(self._request, timeout=self.timeout)
            try:
                resp.raise_for_status()
                return resp.content
            finally:
                resp.close()
        except requests.RequestException as exc:
            raise FetchError(f"failed to send http request to {self.url}: {exc}") from exc

    def close(self) -> None:
        if self._owns_session:
            self.session.close()


def _load(raw: bytes):
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecodeError(f"malformed json: {exc}") from exc


def decode_cluster_snapshot(raw: bytes) -> ClusterSnapshot:
    payload = _load(raw)
    try:
        return ClusterSnapshot.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"unexpected cluster stats shape: {exc}") from exc


def decode_query_records(raw: bytes) -> list[QueryRecord]:
    payload = _load(raw)
    try:
        return _QUERY_LIST.validate_python(payload)
    except ValidationError as exc:
        raise DecodeError(f"unexpected query stats shape: {exc}") from exc
