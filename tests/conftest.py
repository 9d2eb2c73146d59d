import io
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional
from unittest.mock import MagicMock

import pytest

from portfoliocms.application import MutationOrchestrator
from portfoliocms.application.mutations import (
    CertificateStrategy,
    ExperienceStrategy,
    ProjectStrategy,
    SkillStrategy,
    TechnologyStrategy,
)
from portfoliocms.domain import AttachmentInput, EntityKind

UPLOADED_URL = "https://assets.example.com/portfolio/thumbnails/abc123"


class InMemoryDocumentStore:
    """Dict-backed stand-in for one document collection.

    Set ``fail_with`` to make the next writes raise that exception.
    """

    def __init__(self, collection: str):
        self.collection = collection
        self.records: dict[str, dict[str, Any]] = {}
        self.fail_with: Optional[Exception] = None
        self.calls: list[str] = []

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def create(self, payload: Mapping[str, Any], populate: bool = False) -> dict[str, Any]:
        self.calls.append("create")
        self._maybe_fail()
        now = datetime.now(timezone.utc)
        record = {"id": str(uuid.uuid4()), **payload, "created_at": now, "updated_at": now}
        self.records[record["id"]] = record
        return dict(record)

    def update_by_id(self, record_id: str, payload: Mapping[str, Any], populate: bool = False):
        self.calls.append("update_by_id")
        self._maybe_fail()
        if record_id not in self.records:
            return None
        self.records[record_id].update(payload, updated_at=datetime.now(timezone.utc))
        return dict(self.records[record_id])

    def delete_by_id(self, record_id: str):
        self.calls.append("delete_by_id")
        self._maybe_fail()
        return self.records.pop(record_id, None)

    def find_by_id(self, record_id: str, populate: bool = False):
        self.calls.append("find_by_id")
        record = self.records.get(record_id)
        return dict(record) if record else None

    def find_all(self, populate: bool = False):
        self.calls.append("find_all")
        return [dict(record) for record in self.records.values()]

    def find_one(self, filter: Mapping[str, Any]):
        self.calls.append("find_one")
        for record in self.records.values():
            if all(record.get(key) == value for key, value in filter.items()):
                return dict(record)
        return None

    def seed(self, **fields: Any) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        record = {"id": str(uuid.uuid4()), **fields, "created_at": now, "updated_at": now}
        self.records[record["id"]] = record
        return record


@pytest.fixture()
def blob_store() -> MagicMock:
    store = MagicMock(spec=["upload", "delete"])
    store.upload.return_value = UPLOADED_URL
    store.delete.return_value = None
    return store


@pytest.fixture()
def stores() -> dict[EntityKind, InMemoryDocumentStore]:
    return {kind: InMemoryDocumentStore(kind.value) for kind in EntityKind}


@pytest.fixture()
def orchestrator(blob_store: MagicMock, stores: dict[EntityKind, InMemoryDocumentStore]) -> MutationOrchestrator:
    strategies = [
        ProjectStrategy(stores[EntityKind.PROJECT], "thumbnails"),
        ExperienceStrategy(stores[EntityKind.EXPERIENCE], "company_logos"),
        CertificateStrategy(stores[EntityKind.CERTIFICATE], "certificate_logos"),
        TechnologyStrategy(stores[EntityKind.TECHNOLOGY]),
        SkillStrategy(stores[EntityKind.SKILL]),
    ]
    return MutationOrchestrator(blob_store, {strategy.kind: strategy for strategy in strategies})


@pytest.fixture()
def png_attachment() -> AttachmentInput:
    return AttachmentInput(stream=io.BytesIO(b"\x89PNG\r\n\x1a\nfake"), filename="shot.png", content_type="image/png")
