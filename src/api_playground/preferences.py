"""Client-local persisted preferences: base URL and auth token.

Values are grouped by scope (typically the origin of the docs site) so two
sites never read each other's token. The file is plaintext JSON; it is a
convenience, not a credential vault.
"""

import json
import os
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

BASE_URL_KEY = "api_playground_base_url"
TOKEN_KEY = "api_playground_token"


class MemoryPreferenceStore:
    """In-process preferences; nothing survives the interpreter."""

    def __init__(self, values: dict[str, str] | None = None, scope: str = "default"):
        self.scope = scope
        self._values = dict(values or {})

    def get(self, key: str) -> str:
        return self._values.get(key, "")

    def set(self, key: str, value: str) -> None:
        if value:
            self._values[key] = value
        else:
            self._values.pop(key, None)


class FilePreferenceStore:
    """Preferences kept in a JSON file, one section per scope."""

    def __init__(self, path: Path, scope: str = "default"):
        self.path = path
        self.scope = scope
        self._warned = False

    def _read_all(self) -> dict[str, dict[str, str]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("preferences.unreadable", path=str(self.path))
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> str:
        section = self._read_all().get(self.scope, {})
        value = section.get(key, "") if isinstance(section, dict) else ""
        return value if isinstance(value, str) else ""

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        section = data.setdefault(self.scope, {})
        if value:
            section[key] = value
        else:
            section.pop(key, None)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            # an existing file keeps its old mode through os.open
            self.path.chmod(0o600)
            f.write(json.dumps(data, indent=2))

        if key == TOKEN_KEY and value and not self._warned:
            logger.warning(
                "preferences.plaintext_token",
                path=str(self.path),
                scope=self.scope,
                hint="token is stored unencrypted; do not use production credentials",
            )
            self._warned = True
