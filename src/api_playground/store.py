"""Endpoint metadata store.

The playground only needs to read and write one EndpointDescriptor per
documentation page. ``FileEndpointStore`` keeps them as YAML or JSON files
in a directory, which is what the CLI uses.
"""

import re
from pathlib import Path
from typing import Protocol

from api_playground.errors import ValidationError
from api_playground.parser.base import EndpointDescriptor
from api_playground.parser.detect import dump_descriptor, load_descriptor

_PAGE_ID_RE = re.compile(r"[A-Za-z0-9_-][A-Za-z0-9_.-]*")


class EndpointStore(Protocol):
    def get(self, page_id: str) -> EndpointDescriptor | None: ...

    def save(self, page_id: str, descriptor: EndpointDescriptor) -> None: ...

    def delete(self, page_id: str) -> None: ...


class FileEndpointStore:
    """One descriptor file per page id under ``directory``."""

    SUFFIXES = {"yaml": ".yaml", "json": ".json"}

    def __init__(self, directory: Path, fmt: str = "yaml"):
        if fmt not in self.SUFFIXES:
            raise ValueError(f"unsupported format: {fmt}")
        self.directory = directory
        self.fmt = fmt

    def _candidates(self, page_id: str) -> list[Path]:
        if not _PAGE_ID_RE.fullmatch(page_id):
            raise ValidationError(f"Invalid page id: {page_id!r}")
        return [self.directory / f"{page_id}{suffix}" for suffix in (".yaml", ".yml", ".json")]

    def get(self, page_id: str) -> EndpointDescriptor | None:
        for path in self._candidates(page_id):
            if path.exists():
                return load_descriptor(path)
        return None

    def save(self, page_id: str, descriptor: EndpointDescriptor) -> None:
        self.delete(page_id)
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"{page_id}{self.SUFFIXES[self.fmt]}"
        path.write_text(dump_descriptor(descriptor, self.fmt), encoding="utf-8")

    def delete(self, page_id: str) -> None:
        for path in self._candidates(page_id):
            path.unlink(missing_ok=True)
