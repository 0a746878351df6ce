"""Local filesystem storage — uploads and JSON documents.

LocalFileStorage keeps uploaded media under {base_path}/{kind}s/ and
returns API paths that the media route serves. JsonFileStore keeps one
pretty-printed JSON file per key (settings, person info).

Replace either with a hosted store by subclassing the ABCs in
praiser.hooks.interfaces.

Usage:
    from praiser.hooks.storage import JsonFileStore, LocalFileStorage

    storage = LocalFileStorage(base_path="data/uploads")
    url = await storage.store("image", "1700000000-abc.png", data, "image/png")
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

from praiser.hooks.interfaces import DocumentStore, FileStorage

logger = logging.getLogger(__name__)

MEDIA_KINDS = ("image", "video")

_SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class LocalFileStorage(FileStorage):
    """Stores uploads on the local disk.

    Files land in {base_path}/{kind}s/{filename}. URLs returned are API
    paths (/api/v1/media/{kind}/{filename}).
    """

    def __init__(self, base_path: str | Path = "data/uploads") -> None:
        self._base_path = Path(base_path)

    @property
    def base_path(self) -> Path:
        return self._base_path

    async def store(
        self, kind: str, filename: str, data: bytes, content_type: str,
    ) -> str:
        if kind not in MEDIA_KINDS:
            raise ValueError(f"Unknown media kind: {kind!r}")
        target = self.resolve(kind, filename)
        if target is None:
            raise ValueError(f"Unsafe filename: {filename!r}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Stored %s upload %s (%d bytes, %s)", kind, filename, len(data), content_type)
        return f"/api/v1/media/{kind}/{filename}"

    def resolve(self, kind: str, filename: str) -> Path | None:
        """Maps (kind, filename) to a path, refusing anything that could
        escape the storage root."""
        if kind not in MEDIA_KINDS or not _SAFE_NAME.match(filename):
            return None
        root = (self._base_path / f"{kind}s").resolve()
        candidate = (root / filename).resolve()
        if candidate.parent != root:
            return None
        return candidate


class JsonFileStore(DocumentStore):
    """One JSON file per key under a base directory."""

    def __init__(self, base_path: str | Path = "data") -> None:
        self._base_path = Path(base_path)

    def _path(self, key: str) -> Path:
        if not _SAFE_NAME.match(key):
            raise ValueError(f"Invalid document key: {key!r}")
        return self._base_path / f"{key}.json"

    async def load(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.is_file():
            return None
        text = path.read_text(encoding="utf-8")
        if not text.strip():
            return None
        return json.loads(text)

    async def save(self, key: str, document: Any) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8",
        )
