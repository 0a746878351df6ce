"""Hook interfaces — abstract base classes for the swappable services.

These ABCs define the contracts between the API layer and the storage /
auth infrastructure. Each one has a local implementation that lets the
backend run end-to-end on a single machine, and can be replaced by a
hosted one (blob storage, a real identity provider) without touching the
routes.

Leaf module: imports only from abc, pathlib and typing (stdlib).

Usage:
    from praiser.hooks.interfaces import AdminAuth, DocumentStore, FileStorage
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


# ---------------------------------------------------------------------------
# Admin auth
# ---------------------------------------------------------------------------


class AdminAuth(ABC):
    """Checks admin credentials for the settings endpoints."""

    @abstractmethod
    async def verify(self, username: str, password: str) -> bool:
        """Returns True when the credentials identify the admin."""
        ...


# ---------------------------------------------------------------------------
# File storage (uploaded images / videos)
# ---------------------------------------------------------------------------


class FileStorage(ABC):
    """Stores uploaded media and hands back opaque URLs.

    The praise engine never reads media; it only passes the URLs along
    inside PersonProfile.
    """

    @abstractmethod
    async def store(
        self, kind: str, filename: str, data: bytes, content_type: str,
    ) -> str:
        """Writes an upload and returns its URL.

        Args:
            kind: "image" or "video".
            filename: Generated, collision-free file name.
            data: Raw bytes.
            content_type: MIME type reported by the client.

        Returns:
            A URL the browser can load.
        """
        ...

    @abstractmethod
    def resolve(self, kind: str, filename: str) -> Path | None:
        """Returns the local path of a stored upload, or None if unknown
        or outside the storage root."""
        ...


# ---------------------------------------------------------------------------
# Document store (settings, person info)
# ---------------------------------------------------------------------------


class DocumentStore(ABC):
    """Key → JSON document persistence."""

    @abstractmethod
    async def load(self, key: str) -> Any | None:
        """Returns the stored document, or None if absent."""
        ...

    @abstractmethod
    async def save(self, key: str, document: Any) -> None:
        """Creates or overwrites a document."""
        ...
