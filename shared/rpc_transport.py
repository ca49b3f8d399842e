"""
Remote Call Transport

JSON-over-HTTP request/response calls to the metadata and topology services.
Each call is POST http://{addr}/rpc/{method} with a JSON body; the reply body
is the JSON response record.

Retry policy lives here and only here: up to `retry_times` rounds, each round
walking the address list in order. Exhaustion surfaces as RemoteError.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from metaclient.errors import RemoteError

logger = logging.getLogger(__name__)


class RpcTransport:
    """
    Blocking remote-call client with per-call timeout and retry count.

    Usage:
        with RpcTransport(timeout_ms=5000, retry_times=3) as transport:
            reply = transport.call(["10.0.1.1:6700"], "ListPartition", {"fsId": 1})
    """

    def __init__(
        self,
        timeout_ms: int = 10000,
        retry_times: int = 3,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize transport.

        Args:
            timeout_ms: Per-request timeout in milliseconds
            retry_times: Rounds over the address list before giving up
            session: Optional pre-built requests session (tests inject a mock)
        """
        self.timeout_seconds = timeout_ms / 1000.0
        self.retry_times = max(1, retry_times)
        self._session = session or requests.Session()
        self._owns_session = session is None

    def call(self, addrs: List[str], method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Issue one remote call.

        Args:
            addrs: Candidate host:port addresses, tried in order
            method: Remote method name (e.g. 'GetDentry')
            payload: JSON-serializable request record

        Returns:
            Decoded JSON response record

        Raises:
            RemoteError: Every attempt on every address failed
        """
        if not addrs:
            raise RemoteError(method, "no address to send request to")

        last_error = "no attempt made"
        for attempt in range(1, self.retry_times + 1):
            for addr in addrs:
                url = f"http://{addr}/rpc/{method}"
                try:
                    logger.debug(f"{method} -> {addr} (attempt {attempt}/{self.retry_times})")
                    response = self._session.post(url, json=payload, timeout=self.timeout_seconds)
                    response.raise_for_status()
                    body = response.json()
                except requests.RequestException as e:
                    last_error = f"{addr}: {e}"
                    logger.warning(f"{method} to {addr} failed: {e}")
                    continue
                except ValueError as e:
                    last_error = f"{addr}: invalid JSON reply ({e})"
                    logger.warning(f"{method} to {addr} returned non-JSON body")
                    continue

                if not isinstance(body, dict):
                    last_error = f"{addr}: reply is not a JSON object"
                    logger.warning(f"{method} to {addr} returned {type(body).__name__}, expected object")
                    continue
                return body

        raise RemoteError(method, f"retries exhausted ({self.retry_times}), last error: {last_error}")

    def close(self):
        if self._owns_session:
            self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
