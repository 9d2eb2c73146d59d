from __future__ import annotations
from typing import Any, Mapping, Optional, Protocol

# id, created_at, updated_at plus the collection's fields
DocumentRecord = dict[str, Any]

class DocumentStore(Protocol):
    collection: str

    def create(self, payload: Mapping[str, Any], populate: bool = False) -> DocumentRecord: ...
    def update_by_id(self, record_id: str, payload: Mapping[str, Any], populate: bool = False) -> Optional[DocumentRecord]: ...
    def delete_by_id(self, record_id: str) -> Optional[DocumentRecord]: ...
    def find_by_id(self, record_id: str, populate: bool = False) -> Optional[DocumentRecord]: ...
    def find_all(self, populate: bool = False) -> list[DocumentRecord]: ...
    def find_one(self, filter: Mapping[str, Any]) -> Optional[DocumentRecord]: ...
