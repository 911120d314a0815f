"""Layered lookup of named values across registered data files.

Files are consulted in registration order; the first one that parses to a
mapping and contains the key wins. The format comes from the suffix
(``.json``, ``.yaml``/``.yml``, ``.toml``); other suffixes try JSON, then
YAML, then TOML. Unreadable or unparsable files are skipped with a
warning.
"""

from __future__ import annotations

import enum
import json
import logging
import os
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from cypat.domain.common.errors import DataKeyNotFoundError
from cypat.engine.guarded import Guarded
from cypat.infra.data.values import Value, to_value

logger = logging.getLogger(__name__)


class DataFormat(enum.Enum):
    JSON = "json"
    YAML = "yaml"
    TOML = "toml"


_SUFFIX_FORMATS = {
    ".json": DataFormat.JSON,
    ".yaml": DataFormat.YAML,
    ".yml": DataFormat.YAML,
    ".toml": DataFormat.TOML,
}

_PARSE_ERRORS = (
    json.JSONDecodeError,
    yaml.YAMLError,
    tomllib.TOMLDecodeError,
    UnicodeDecodeError,
)


def _parse(path: Path, fmt: DataFormat) -> Any:
    if fmt == DataFormat.TOML:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    with path.open("r", encoding="utf-8") as fh:
        if fmt == DataFormat.JSON:
            return json.load(fh)
        return yaml.safe_load(fh)


def load_document(path: str | os.PathLike) -> Mapping | None:
    """Parse ``path`` into a top-level mapping, or None if that is not possible."""
    path = Path(path)
    fmt = _SUFFIX_FORMATS.get(path.suffix.lower())
    candidates = (fmt,) if fmt is not None else tuple(DataFormat)

    for candidate in candidates:
        try:
            document = _parse(path, candidate)
        except OSError as exc:
            logger.warning("Cannot read data file %s: %s", path, exc)
            return None
        except _PARSE_ERRORS:
            logger.debug("%s is not valid %s", path, candidate.value)
            continue
        if isinstance(document, Mapping):
            return document

    logger.warning("Data file %s has no top-level mapping; skipping", path)
    return None


class DataReader:
    """Ordered set of data files queried by key."""

    def __init__(
        self,
        paths: Iterable[str | os.PathLike] = (),
        *,
        ignore_lock_failures: bool = False,
    ) -> None:
        self._files = Guarded(
            [], name="data file list", ignore_failures=ignore_lock_failures
        )
        for path in paths:
            self.register_file(path)

    def register_file(self, path: str | os.PathLike) -> None:
        with self._files.hold() as files:
            files.append(Path(path))

    @property
    def files(self) -> list[Path]:
        with self._files.hold() as files:
            return list(files)

    def get(self, key: str) -> Value:
        """Value of ``key`` from the first file defining it, else None."""
        found, raw = self._lookup(key)
        return to_value(raw) if found else None

    def get_or_raise(self, key: str) -> Value:
        """Like ``get`` but a key missing from every file raises.

        Raises:
            DataKeyNotFoundError: If no registered file defines ``key``
        """
        found, raw = self._lookup(key)
        if not found:
            raise DataKeyNotFoundError(key)
        return to_value(raw)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._lookup(key)[0]

    def _lookup(self, key: str) -> tuple[bool, Any]:
        for path in self.files:
            document = load_document(path)
            if document is not None and key in document:
                logger.debug("Key %r resolved from %s", key, path)
                return True, document[key]
        return False, None
