"""Per-entity rules plugged into the mutation orchestrator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Mapping

from pydantic import BaseModel

from portfoliocms.application.mutations.inputs import (
    CertificateCreate,
    CertificateUpdate,
    ExperienceCreate,
    ExperienceUpdate,
    PayloadModel,
    ProjectCreate,
    ProjectUpdate,
    SkillCreate,
    SkillUpdate,
    TechnologyCreate,
    TechnologyUpdate,
)
from portfoliocms.application.ports.document_store import DocumentRecord, DocumentStore
from portfoliocms.domain.errors import ConflictError
from portfoliocms.domain.models import (
    Certificate,
    EntityKind,
    Experience,
    MutationKind,
    Priority,
    Project,
    Skill,
    Technology,
)


class EntityStrategy(ABC):
    """Field mapping, validation and store binding for one collection."""

    kind: ClassVar[EntityKind]
    label: ClassVar[str]
    create_model: ClassVar[type[PayloadModel]]
    update_model: ClassVar[type[PayloadModel]]
    attachment_field: ClassVar[str | None] = None
    attachment_label: ClassVar[str] = "Attachment"
    attachment_required: ClassVar[bool] = False
    populate: ClassVar[bool] = False

    def __init__(self, store: DocumentStore, folder: str | None = None):
        self.store = store
        self.folder = folder
        if self.attachment_field is not None and not folder:
            raise ValueError(f"{type(self).__name__} needs a blob folder for {self.attachment_field}")

    @property
    def accepts_attachment(self) -> bool:
        return self.attachment_field is not None

    def validate(self, kind: MutationKind, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Return the normalized fields to write, or raise ValidationError."""
        model = self.create_model if kind is MutationKind.CREATE else self.update_model
        return model.parse(payload).fields()

    def check_conflicts(self, kind: MutationKind, fields: Mapping[str, Any], record_id: str | None = None) -> None:
        """Raise ConflictError when a uniqueness rule would be violated."""

    def build_document(self, fields: Mapping[str, Any], attachment_url: str | None) -> dict[str, Any]:
        document = dict(fields)
        # Without a new upload the stored attachment is left as it is
        if attachment_url is not None and self.attachment_field is not None:
            document[self.attachment_field] = attachment_url
        return document

    def attachment_url(self, record: Mapping[str, Any]) -> str | None:
        if self.attachment_field is None:
            return None
        return record.get(self.attachment_field) or None

    @abstractmethod
    def present(self, record: DocumentRecord) -> BaseModel: ...


def _present_technologies(values: list[Any]) -> list[Technology | str]:
    return [Technology.model_validate(value) if isinstance(value, dict) else str(value) for value in values or []]


class ProjectStrategy(EntityStrategy):
    kind = EntityKind.PROJECT
    label = "project"
    create_model = ProjectCreate
    update_model = ProjectUpdate
    attachment_field = "thumbnail"
    attachment_label = "Thumbnail"
    attachment_required = True
    populate = True

    def present(self, record: DocumentRecord) -> Project:
        return Project.model_validate(
            {**record, "technologies": _present_technologies(record.get("technologies", []))}
        )


class ExperienceStrategy(EntityStrategy):
    kind = EntityKind.EXPERIENCE
    label = "experience"
    create_model = ExperienceCreate
    update_model = ExperienceUpdate
    attachment_field = "company_logo"
    attachment_label = "Company logo"

    def present(self, record: DocumentRecord) -> Experience:
        return Experience.model_validate(record)


class CertificateStrategy(EntityStrategy):
    kind = EntityKind.CERTIFICATE
    label = "certificate"
    create_model = CertificateCreate
    update_model = CertificateUpdate
    attachment_field = "logo"
    attachment_label = "Logo"

    def present(self, record: DocumentRecord) -> Certificate:
        return Certificate.model_validate(
            {**record, "priority": Priority.from_stored(record.get("priority")).name}
        )


class TechnologyStrategy(EntityStrategy):
    kind = EntityKind.TECHNOLOGY
    label = "technology"
    create_model = TechnologyCreate
    update_model = TechnologyUpdate

    def check_conflicts(self, kind: MutationKind, fields: Mapping[str, Any], record_id: str | None = None) -> None:
        name = fields.get("name")
        if name is None:
            return
        existing = self.store.find_one({"name": name})
        if existing is not None and existing.get("id") != record_id:
            raise ConflictError(f'Technology with name "{name}" already exists')

    def present(self, record: DocumentRecord) -> Technology:
        return Technology.model_validate(record)


class SkillStrategy(EntityStrategy):
    kind = EntityKind.SKILL
    label = "skill"
    create_model = SkillCreate
    update_model = SkillUpdate
    populate = True

    def present(self, record: DocumentRecord) -> Skill:
        return Skill.model_validate(
            {**record, "technologies": _present_technologies(record.get("technologies", []))}
        )
