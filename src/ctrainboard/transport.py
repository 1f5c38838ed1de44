"""Fetch feed payloads with failover across direct and relay endpoints."""

import logging
import time
from typing import List, Optional, Sequence
from urllib.parse import quote

import requests

from .errors import TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "ctrainboard/0.1.0"
CHUNK_SIZE = 8192


class FeedTransport:
    """Fetches raw feed bytes, trying each endpoint once in priority order."""

    def __init__(
        self,
        relay_prefixes: Sequence[str] = (),
        use_direct: bool = True,
        timeout: float = 10.0,
        min_payload_bytes: int = 100,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the transport.

        Args:
            relay_prefixes: Relay URL prefixes; the percent-encoded target URL is appended.
            use_direct: If True, the target URL itself is tried before any relay.
            timeout: Seconds to wait for each endpoint.
            min_payload_bytes: Responses shorter than this are treated as truncated.
            session: Optional requests session to reuse.
        """
        self.relay_prefixes = list(relay_prefixes)
        self.use_direct = use_direct
        self.timeout = timeout
        self.min_payload_bytes = min_payload_bytes
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None) -> "FeedTransport":
        return cls(
            relay_prefixes=config.relay_prefixes,
            use_direct=config.use_direct,
            timeout=config.request_timeout,
            min_payload_bytes=config.min_payload_bytes,
            session=session,
        )

    def endpoints_for(self, target_url: str) -> List[str]:
        """Candidate URLs for a feed, in the order they are tried."""
        endpoints = [target_url] if self.use_direct else []
        encoded = quote(target_url, safe="")
        endpoints.extend(prefix + encoded for prefix in self.relay_prefixes)
        return endpoints

    def fetch_feed_bytes(self, target_url: str) -> bytes:
        """
        Fetch a feed payload.

        Args:
            target_url: Feed URL.

        Returns:
            Raw payload bytes from the first endpoint that returns a valid response.

        Raises:
            TransportError: If every endpoint fails.
        """
        for endpoint in self.endpoints_for(target_url):
            try:
                payload = self._fetch_endpoint(endpoint)
                logger.debug(f"Fetched {len(payload)} bytes from {endpoint}")
                return payload
            except requests.Timeout:
                logger.warning(f"Endpoint {endpoint} timed out after {self.timeout}s, trying next")
            except (requests.RequestException, TransportError) as e:
                logger.warning(f"Endpoint {endpoint} failed: {e}. Trying next")

        logger.error(f"All endpoints exhausted for {target_url}")
        raise TransportError("all endpoints exhausted")

    def _fetch_endpoint(self, endpoint: str) -> bytes:
        """
        Fetch one endpoint within ``self.timeout`` seconds overall.

        The requests timeout only bounds each connect/read step, so the body is
        streamed and checked against a deadline for the whole request.

        Raises:
            requests.Timeout: If the deadline passes before the body is complete.
            requests.RequestException: On network or HTTP status errors.
            TransportError: If the response is not a usable feed.
        """
        deadline = time.monotonic() + self.timeout
        response = self.session.get(endpoint, timeout=self.timeout, stream=True)
        try:
            response.raise_for_status()
            self._validate_headers(response)

            chunks = []
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if time.monotonic() > deadline:
                    raise requests.Timeout(f"Body not received within {self.timeout}s")
                chunks.append(chunk)
            payload = b"".join(chunks)
        finally:
            response.close()

        self._validate_payload(payload)
        return payload

    def _validate_headers(self, response: requests.Response) -> None:
        """Reject relay error pages served instead of the feed."""
        content_type = response.headers.get("Content-Type", "")
        if "text/html" in content_type.lower():
            raise TransportError(f"Got HTML ({content_type}) instead of binary feed data")

    def _validate_payload(self, payload: bytes) -> None:
        """Reject truncated payloads."""
        if len(payload) < self.min_payload_bytes:
            raise TransportError(f"Payload too short ({len(payload)} < {self.min_payload_bytes} bytes)")

    def close(self) -> None:
        self.session.close()
