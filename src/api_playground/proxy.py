"""Request proxy: relays a request to any origin and normalizes the response.

Transport failures never escape ``execute``: they come back as an envelope
with ``status == 0``. Upstream 4xx/5xx responses are ordinary envelopes.
"""

import time
from urllib.parse import urlsplit

import httpx
import structlog

from api_playground.errors import TransportError, ValidationError
from api_playground.parser.base import BODY_METHODS, ProxyTarget, ResponseEnvelope

logger = structlog.get_logger(__name__)


class RequestProxy:
    """Executes HTTP requests with httpx on behalf of the playground."""

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.transport = transport

    def validate(self, target: ProxyTarget) -> ProxyTarget:
        """Check url and method before any I/O. Raises ValidationError."""
        if not target.url or not target.method:
            raise ValidationError("URL and method are required")

        parts = urlsplit(target.url)
        try:
            parts.port
        except ValueError as e:
            raise ValidationError("Invalid URL") from e
        if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
            raise ValidationError("Invalid URL")

        return target.model_copy(update={"method": target.method.upper()})

    async def execute(self, target: ProxyTarget | dict) -> ResponseEnvelope:
        """Send ``target`` and return the normalized response envelope.

        Raises ValidationError for a missing or malformed url/method; every
        network-level failure is returned as a status 0 envelope instead.
        """
        if isinstance(target, dict):
            target = ProxyTarget.model_validate(target)
        target = self.validate(target)

        parts = urlsplit(target.url)
        log = logger.bind(method=target.method, host=parts.netloc, path=parts.path)
        log.info("proxy.request")

        start = time.perf_counter()
        try:
            response = await self._send(target)
        except TransportError as e:
            log.warning("proxy.transport_error", error=str(e))
            return ResponseEnvelope.failure(str(e))

        log.info(
            "proxy.response",
            status=response.status_code,
            elapsed_ms=round((time.perf_counter() - start) * 1000.0, 1),
        )
        return ResponseEnvelope(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=flatten_headers(response.headers),
            data=decode_body(response),
        )

    async def _send(self, target: ProxyTarget) -> httpx.Response:
        client_kwargs = {"transport": self.transport, "follow_redirects": True}
        if self.timeout is not None:
            client_kwargs["timeout"] = httpx.Timeout(self.timeout)

        content = target.body if target.body and target.method in BODY_METHODS else None
        try:
            async with httpx.AsyncClient(**client_kwargs) as client:
                return await client.request(
                    target.method,
                    target.url,
                    headers=target.headers or None,
                    content=content,
                )
        except httpx.InvalidURL as e:
            raise ValidationError("Invalid URL") from e
        except (httpx.HTTPError, UnicodeEncodeError) as e:
            raise TransportError(str(e) or type(e).__name__) from e


def decode_body(response: httpx.Response):
    """JSON for JSON content types (raw text if that fails), text otherwise."""
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


def flatten_headers(headers: httpx.Headers) -> dict[str, str]:
    """One value per header name; the last one wins."""
    flat: dict[str, str] = {}
    for name, value in headers.multi_items():
        flat[name] = value
    return flat
