"""Load endpoint descriptor files, detecting JSON or YAML."""

import json
from pathlib import Path

import pydantic
import yaml

from api_playground.errors import ValidationError
from api_playground.parser.base import EndpointDescriptor


def detect_format(file_path: Path) -> str:
    """Detect the format of a descriptor file.

    Returns: 'json' or 'yaml'. The suffix decides when it is known,
    otherwise the content is sniffed.
    """
    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"

    text = file_path.read_text(encoding="utf-8")
    try:
        json.loads(text)
        return "json"
    except (json.JSONDecodeError, ValueError):
        return "yaml"


def load_descriptor(file_path: Path) -> EndpointDescriptor:
    """Read an EndpointDescriptor from a JSON or YAML file."""
    text = file_path.read_text(encoding="utf-8")
    try:
        if detect_format(file_path) == "json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValidationError(f"{file_path}: not a valid descriptor file ({e})") from e

    return parse_descriptor(data or {}, source=str(file_path))


def parse_descriptor(data: dict, source: str = "descriptor") -> EndpointDescriptor:
    """Validate a raw metadata record, reporting problems as ValidationError."""
    try:
        return EndpointDescriptor.model_validate(data)
    except pydantic.ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ValidationError(f"{source}: {messages}") from e


def dump_descriptor(descriptor: EndpointDescriptor, fmt: str) -> str:
    data = descriptor.model_dump(mode="json", exclude_none=True)
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
