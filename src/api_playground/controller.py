"""Playground controller: one interactive session against one endpoint.

The controller owns the session state (base URL, token, parameter values,
edited body, last response) and routes user actions through the request
model, the curl generator and the proxy. Nothing is global: every session
is its own object.
"""

import asyncio
import json
from typing import Awaitable, Callable

import structlog
from pydantic import JsonValue

from api_playground.config import get_settings
from api_playground.errors import ValidationError
from api_playground.generator.curl import generate_curl
from api_playground.parser.base import EndpointDescriptor, Parameter, ResponseEnvelope
from api_playground.parser.detect import parse_descriptor
from api_playground.preferences import BASE_URL_KEY, TOKEN_KEY, MemoryPreferenceStore
from api_playground.proxy import RequestProxy
from api_playground.request import RequestModel, has_value, render_value

logger = structlog.get_logger(__name__)

Clipboard = Callable[[str], Awaitable[None]]


def seed_values(parameters: list[Parameter]) -> dict[str, JsonValue]:
    """Initial values: defaults where given, '' for optional params without one.

    Required parameters without a default stay absent so "never set" can be
    told apart from "cleared".
    """
    values: dict[str, JsonValue] = {}
    for param in parameters:
        if param.default is not None:
            values[param.name] = param.default
        elif not param.required:
            values[param.name] = ""
    return values


def coerce_value(param: Parameter, text: str) -> JsonValue:
    """Convert text typed by a user into a value of the parameter's type."""
    if text == "":
        return ""

    if param.type == "integer":
        try:
            value = int(text)
        except ValueError as e:
            raise ValidationError(f"{param.name} must be an integer") from e
    elif param.type == "number":
        try:
            value = int(text) if text.lstrip("-").isdigit() else float(text)
        except ValueError as e:
            raise ValidationError(f"{param.name} must be a number") from e
    elif param.type == "boolean":
        lowered = text.lower()
        if lowered not in ("true", "false"):
            raise ValidationError(f"{param.name} must be true or false")
        value = lowered == "true"
    elif param.type in ("array", "object"):
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            value = text
    else:
        value = text

    if param.enum and render_value(value) not in {render_value(option) for option in param.enum}:
        allowed = ", ".join(render_value(option) for option in param.enum)
        raise ValidationError(f"{param.name} must be one of: {allowed}")
    return value


class PlaygroundController:
    """Session state and actions of the API playground."""

    def __init__(
        self,
        preferences=None,
        proxy=None,
        clipboard: Clipboard | None = None,
        copied_reset_seconds: float | None = None,
    ):
        settings = get_settings()
        if proxy is None:
            proxy = RequestProxy(timeout=settings.proxy_timeout)

        self.preferences = preferences if preferences is not None else MemoryPreferenceStore()
        self.proxy = proxy
        self.clipboard = clipboard
        self.copied_reset_seconds = (
            settings.copied_reset_seconds if copied_reset_seconds is None else copied_reset_seconds
        )

        self.descriptor = EndpointDescriptor()
        self.base_url = ""
        self.auth_token = ""
        self.parameter_values: dict[str, JsonValue] = {}
        self.request_body_text = ""
        self.last_response: ResponseEnvelope | None = None
        self.error: str | None = None
        self.copied = False
        self.pending = 0

        self._issued = 0
        self._resolved = 0
        self._copied_reset: asyncio.TimerHandle | None = None

    def load(self, descriptor: EndpointDescriptor | dict) -> None:
        """Start a session for ``descriptor``.

        A raw metadata record is validated first; duplicate parameter names
        within one location raise ValidationError.
        """
        if isinstance(descriptor, dict):
            descriptor = parse_descriptor(descriptor)

        self.descriptor = descriptor
        self.base_url = self.preferences.get(BASE_URL_KEY)
        self.auth_token = self.preferences.get(TOKEN_KEY)
        self.parameter_values = seed_values(descriptor.parameters)

        schema = descriptor.api_request_body_schema
        self.request_body_text = json.dumps(schema, indent=2, ensure_ascii=False) if schema is not None else ""

        self.last_response = None
        self.error = None
        logger.debug(
            "controller.loaded",
            method=descriptor.api_method,
            endpoint=descriptor.api_endpoint,
            parameters=len(descriptor.parameters),
        )

    def set_base_url(self, value: str) -> None:
        self.base_url = value
        self.preferences.set(BASE_URL_KEY, value)

    def set_token(self, value: str) -> None:
        self.auth_token = value
        self.preferences.set(TOKEN_KEY, value)

    def set_parameter(self, name: str, value: JsonValue) -> None:
        self.parameter_values[name] = value

    def set_parameter_text(self, name: str, text: str) -> bool:
        """Set a parameter from user-typed text, coercing it to the declared type.

        On a type or enum mismatch the message goes to ``error`` and the
        previous value is kept.
        """
        param = self._parameter(name)
        if param is None:
            self.parameter_values[name] = text
            return True
        try:
            self.parameter_values[name] = coerce_value(param, text)
        except ValidationError as e:
            self.error = str(e)
            return False
        return True

    def set_request_body(self, text: str) -> None:
        self.request_body_text = text

    def _parameter(self, name: str) -> Parameter | None:
        return next((p for p in self.descriptor.parameters if p.name == name), None)

    @property
    def model(self) -> RequestModel:
        return RequestModel.from_descriptor(
            self.descriptor,
            base_url=self.base_url,
            parameter_values=self.parameter_values,
            request_body_text=self.request_body_text,
            auth_token=self.auth_token,
        )

    @property
    def can_execute(self) -> bool:
        return bool(self.base_url and self.descriptor.api_endpoint and self.descriptor.api_method)

    @property
    def loading(self) -> bool:
        return self.pending > 0

    @property
    def response_ok(self) -> bool:
        """True for a 2xx response; transport failures and 4xx/5xx are not."""
        return self.last_response is not None and self.last_response.ok

    @property
    def missing_required(self) -> list[str]:
        return [
            p.name
            for p in self.descriptor.parameters
            if p.required and not has_value(self.parameter_values.get(p.name))
        ]

    def curl_command(self) -> str:
        return generate_curl(self.model)

    async def execute(self) -> ResponseEnvelope | None:
        """Send the current request through the proxy.

        Validation problems land in ``error`` and nothing is sent. Each call
        gets an increasing id; a response that resolves after a newer one has
        already been shown is dropped.
        """
        self.error = None
        try:
            target = self.model.to_target()
        except ValidationError as e:
            self.error = str(e)
            return None

        self._issued += 1
        request_id = self._issued
        self.last_response = None
        self.pending += 1
        try:
            envelope = await self.proxy.execute(target)
        except ValidationError as e:
            self.error = str(e)
            return None
        finally:
            self.pending -= 1

        if request_id > self._resolved:
            self._resolved = request_id
            self.last_response = envelope
        else:
            logger.debug("controller.stale_response", request_id=request_id, shown=self._resolved)
        return envelope

    async def copy_request(self) -> bool:
        """Copy the curl command to the clipboard and raise ``copied`` briefly."""
        command = self.curl_command()
        if not command:
            self.error = "Please configure Base URL and API endpoint first"
            return False
        if self.clipboard is None:
            self.error = "No clipboard available"
            return False

        try:
            await self.clipboard(command)
        except Exception as e:
            logger.warning("controller.copy_failed", error=str(e))
            self.error = "Failed to copy curl command"
            return False

        self.copied = True
        if self._copied_reset is not None:
            self._copied_reset.cancel()
        loop = asyncio.get_running_loop()
        self._copied_reset = loop.call_later(self.copied_reset_seconds, self._clear_copied)
        return True

    def _clear_copied(self) -> None:
        self.copied = False
        self._copied_reset = None
