"""
Input models for entity mutations.

Each collection has a create model (every required field checked) and an
update model (only the fields present in the payload are validated and
written). The first pydantic error is reported as a domain ValidationError
carrying the caller-facing message for that field.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, ClassVar, Mapping, Self
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from portfoliocms.domain.errors import ValidationError
from portfoliocms.domain.models import CertificateCategory, Priority

# Error type for messages that are already caller-facing
FIELD_ERROR = "portfolio_field"

_RECORD_ID = TypeAdapter(UUID)


def require_record_id(record_id: Any, label: str) -> str:
    """Record ids are canonical UUID strings."""
    try:
        if not isinstance(record_id, str):
            raise ValueError(record_id)
        _RECORD_ID.validate_python(record_id)
    except (ValueError, PydanticValidationError):
        raise ValidationError(f"Invalid {label} id provided") from None
    return record_id


def _iso_datetime(value: Any) -> Any:
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip())
    return value


def _optional_iso_datetime(value: Any) -> Any:
    # A falsy value clears the date
    if not value:
        return None
    return _iso_datetime(value)


def _technology_ids(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        raise PydanticCustomError(FIELD_ERROR, "Technologies must be an array of IDs")
    for item in value:
        try:
            _RECORD_ID.validate_python(item if isinstance(item, str) else None)
        except PydanticValidationError:
            raise PydanticCustomError(FIELD_ERROR, "Invalid technology id: {id}", {"id": str(item)}) from None
    return [str(item) for item in value]


def _priority(value: Any) -> Priority:
    if not isinstance(value, str) or value not in Priority.__members__:
        raise ValueError("unknown priority")
    return Priority.from_name(value)


IsoDatetime = Annotated[datetime, BeforeValidator(_iso_datetime)]
OptionalIsoDatetime = Annotated[datetime | None, BeforeValidator(_optional_iso_datetime)]
PriorityName = Annotated[Priority, BeforeValidator(_priority)]
TechnologyIds = Annotated[list[str], BeforeValidator(_technology_ids)]


class PayloadModel(BaseModel):
    """Base for mutation payloads."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    # Field name -> message for any failure on that field
    messages: ClassVar[dict[str, str]] = {}
    # Field name -> message when the field is absent or null
    missing_messages: ClassVar[dict[str, str]] = {}

    @classmethod
    def parse(cls, payload: Mapping[str, Any]) -> Self:
        try:
            return cls.model_validate(dict(payload))
        except PydanticValidationError as e:
            raise ValidationError(cls.error_message(e.errors()[0])) from None

    @classmethod
    def error_message(cls, error: Mapping[str, Any]) -> str:
        if error["type"] == FIELD_ERROR:
            return error["msg"]
        field_name = str(error["loc"][0]) if error["loc"] else ""
        if error["type"] == "missing" or error.get("input") is None:
            if field_name in cls.missing_messages:
                return cls.missing_messages[field_name]
        return cls.messages.get(field_name, f"Invalid {field_name}")

    def fields(self) -> dict[str, Any]:
        return self.model_dump()


class PartialPayload(PayloadModel):
    """Update payload: absent fields are neither validated nor written."""

    def fields(self) -> dict[str, Any]:
        return self.model_dump(include=self.model_fields_set)


# ============================================================================
# Projects
# ============================================================================


class ProjectCreate(PayloadModel):
    messages: ClassVar[dict[str, str]] = {
        "title": "Title is required",
        "status": "Status is required",
        "technologies": "Technologies must be an array of IDs",
    }

    title: str = Field(min_length=1)
    description: str | None = None
    status: str = Field(min_length=1)
    role: str | None = None
    livelink: str | None = None
    githublink: str | None = None
    # Reference ids are cast by the document store
    technologies: list[str] = Field(default_factory=list)

    @field_validator("technologies", mode="before")
    @classmethod
    def no_technologies(cls, value: Any) -> Any:
        return [] if value is None else value


class ProjectUpdate(PartialPayload):
    messages: ClassVar[dict[str, str]] = {
        "title": "Title cannot be empty",
        "status": "Status cannot be empty",
        "technologies": "Technologies must be an array of IDs",
    }

    title: str = Field(None, min_length=1)
    description: str | None = None
    status: str = Field(None, min_length=1)
    role: str | None = None
    livelink: str | None = None
    githublink: str | None = None
    technologies: list[str] = None


# ============================================================================
# Experiences
# ============================================================================


class ExperienceCreate(PayloadModel):
    messages: ClassVar[dict[str, str]] = {
        "company": "Company is required",
        "position": "Position is required",
        "from_date": 'Valid "from" date is required (ISO string)',
        "to_date": 'If provided, "to" must be a valid date (ISO string)',
        "achievements": "Achievements must be an array of strings",
    }

    company: str = Field(min_length=1)
    position: str = Field(min_length=1)
    location: str | None = None
    from_date: IsoDatetime
    to_date: OptionalIsoDatetime = None
    achievements: list[str] = Field(default_factory=list)


class ExperienceUpdate(PartialPayload):
    messages: ClassVar[dict[str, str]] = {
        "company": "Company cannot be empty",
        "position": "Position cannot be empty",
        "from_date": '"from" must be a valid date (ISO string)',
        "to_date": '"to" must be a valid date (ISO string)',
        "achievements": "Achievements must be an array of strings",
    }

    company: str = Field(None, min_length=1)
    position: str = Field(None, min_length=1)
    location: str | None = None
    from_date: IsoDatetime = None
    to_date: OptionalIsoDatetime = None
    achievements: list[str] = None


# ============================================================================
# Certificates
# ============================================================================


class CertificateCreate(PayloadModel):
    model_config = ConfigDict(use_enum_values=True)

    messages: ClassVar[dict[str, str]] = {
        "title": "Title is required",
        "issuer": "Issuer is required",
        "category": "Invalid category",
        "priority": "Invalid priority",
        "issued_date": "Valid issuedDate is required (ISO string)",
        "valid_until": "If provided, validUntil must be a valid date (ISO string)",
        "skills": "Skills must be an array of strings",
    }
    missing_messages: ClassVar[dict[str, str]] = {
        "category": "Category is required",
        "priority": "Priority is required",
    }

    title: str = Field(min_length=1)
    issuer: str = Field(min_length=1)
    category: CertificateCategory
    priority: PriorityName
    issued_date: IsoDatetime
    valid_until: OptionalIsoDatetime = None
    credential_id: str | None = None
    description: str | None = None
    skills: list[str] = Field(default_factory=list)
    type: str = "certificate"
    status: str = "active"

    @field_validator("type", "status", mode="before")
    @classmethod
    def blank_is_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return value


class CertificateUpdate(PartialPayload):
    model_config = ConfigDict(use_enum_values=True)

    messages: ClassVar[dict[str, str]] = {
        "title": "Title cannot be empty",
        "issuer": "Issuer cannot be empty",
        "category": "Invalid category",
        "priority": "Invalid priority",
        "issued_date": "issuedDate must be a valid date (ISO string)",
        "valid_until": "validUntil must be a valid date (ISO string)",
        "skills": "Skills must be an array of strings",
        "type": "Type cannot be empty",
        "status": "Status cannot be empty",
    }

    title: str = Field(None, min_length=1)
    issuer: str = Field(None, min_length=1)
    category: CertificateCategory = None
    priority: PriorityName = None
    issued_date: IsoDatetime = None
    valid_until: OptionalIsoDatetime = None
    credential_id: str | None = None
    description: str | None = None
    skills: list[str] = None
    type: str = Field(None, min_length=1)
    status: str = Field(None, min_length=1)


# ============================================================================
# Technologies and skills
# ============================================================================


class TechnologyCreate(PayloadModel):
    messages: ClassVar[dict[str, str]] = {
        "name": "Name is required",
        "level": "Level is required",
        "category": "Category is required",
    }

    name: str = Field(min_length=1)
    logo: str | None = None
    level: str = Field(min_length=1)
    experience: str | None = None
    category: str = Field(min_length=1)


class TechnologyUpdate(PartialPayload):
    messages: ClassVar[dict[str, str]] = {
        "name": "Name cannot be empty",
        "level": "Level cannot be empty",
        "category": "Category cannot be empty",
    }

    name: str = Field(None, min_length=1)
    logo: str | None = None
    level: str = Field(None, min_length=1)
    experience: str | None = None
    category: str = Field(None, min_length=1)


class SkillCreate(PayloadModel):
    messages: ClassVar[dict[str, str]] = {"title": "Title is required"}

    title: str = Field(min_length=1)
    description: str | None = None
    technologies: TechnologyIds = Field(default_factory=list)

    @field_validator("technologies", mode="before")
    @classmethod
    def no_technologies(cls, value: Any) -> Any:
        return [] if value is None else value


class SkillUpdate(PartialPayload):
    messages: ClassVar[dict[str, str]] = {"title": "Title cannot be empty"}

    title: str = Field(None, min_length=1)
    description: str | None = None
    technologies: TechnologyIds = None
