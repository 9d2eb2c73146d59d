from __future__ import annotations
from typing import BinaryIO, Optional, Protocol

class BlobStore(Protocol):
    def upload(self, stream: BinaryIO, folder: str, content_type: Optional[str] = None) -> str: ...
    def delete(self, public_id: str, folder: str) -> None: ...
