"""Domain models for the portfolio CMS."""

from __future__ import annotations

from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, Field


class EntityKind(str, Enum):
    """Portfolio collections that accept mutations."""

    PROJECT = "projects"
    TECHNOLOGY = "technologies"
    SKILL = "skills"
    EXPERIENCE = "experiences"
    CERTIFICATE = "certificates"


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class CertificateCategory(str, Enum):
    COMPETITION = "COMPETITION"
    ACADEMIC = "ACADEMIC"
    RECOGNITION = "RECOGNITION"


class Priority(IntEnum):
    """Certificate priority, stored by value and exposed by name."""

    HIGH = 3
    MEDIUM = 2
    LOW = 1

    @classmethod
    def from_name(cls, name: str) -> Priority:
        return cls[name]

    @classmethod
    def from_stored(cls, value: Any) -> Priority:
        """Map a stored number back to a priority; unknown values read as LOW."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.LOW


class Record(BaseModel):
    """Fields every persisted record carries."""

    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Technology(Record):
    name: str
    logo: str | None = None
    level: str
    experience: str | None = None
    category: str


class Project(Record):
    title: str
    description: str | None = None
    status: str
    role: str | None = None
    livelink: str | None = None
    githublink: str | None = None
    thumbnail: str | None = None
    technologies: list[Technology | str] = Field(default_factory=list)


class Skill(Record):
    title: str
    description: str | None = None
    technologies: list[Technology | str] = Field(default_factory=list)


class Experience(Record):
    company: str
    company_logo: str | None = None
    position: str
    location: str | None = None
    from_date: datetime
    to_date: datetime | None = None
    achievements: list[str] = Field(default_factory=list)


class Certificate(Record):
    title: str
    issuer: str
    category: CertificateCategory
    priority: str
    issued_date: datetime
    valid_until: datetime | None = None
    credential_id: str | None = None
    logo: str | None = None
    description: str | None = None
    skills: list[str] = Field(default_factory=list)
    type: str = "certificate"
    status: str = "active"
