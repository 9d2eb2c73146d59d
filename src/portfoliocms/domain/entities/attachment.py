from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Optional
from urllib.parse import urlparse


def public_id_from_url(url: str) -> str:
    """Derive the blob store's public identifier from an uploaded object's URL.

    Takes the final path segment and strips its last extension, if any.
    """
    filename = url.rsplit("/", 1)[-1]
    stem, dot, _ = filename.rpartition(".")
    return stem if dot and stem else filename


def folder_from_url(url: str) -> Optional[str]:
    """Folder an uploaded object lives in: the path segment before its id."""
    segments = [segment for segment in urlparse(url).path.split("/") if segment]
    if len(segments) < 2:
        return None
    return segments[-2]


@dataclass(frozen=True)
class AttachmentInput:
    """A binary upload as handed over by the transport layer.

    The stream is read at most once.
    """

    stream: BinaryIO
    filename: Optional[str]
    content_type: Optional[str]


@dataclass(frozen=True)
class UploadResult:
    url: str
    folder: str

    @property
    def public_id(self) -> str:
        return public_id_from_url(self.url)


@dataclass
class CompensationIntent:
    """Tracks an upload that is not yet owned by a committed record."""

    upload: UploadResult
    resolved: bool = False

    def discharge(self) -> None:
        # Blob now belongs to the committed record
        self.resolved = True
