"""Collection schemas enforced by the document store on every write."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

FieldType = Literal["string", "number", "date", "strings", "refs"]


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: FieldType = "string"
    required: bool = False
    unique: bool = False
    ref: Optional[str] = None  # referenced collection for "refs"


@dataclass(frozen=True)
class CollectionSchema:
    collection: str
    fields: tuple[FieldSpec, ...]

    def field(self, name: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    @property
    def unique_fields(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.fields if spec.unique)

    @property
    def references(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.fields if spec.type == "refs")


TECHNOLOGIES = CollectionSchema(
    "technologies",
    (
        FieldSpec("name", required=True, unique=True),
        FieldSpec("logo"),
        FieldSpec("level", required=True),
        FieldSpec("experience"),
        FieldSpec("category", required=True),
    ),
)

PROJECTS = CollectionSchema(
    "projects",
    (
        FieldSpec("title", required=True),
        FieldSpec("description"),
        FieldSpec("status", required=True),
        FieldSpec("role"),
        FieldSpec("livelink"),
        FieldSpec("githublink"),
        FieldSpec("thumbnail"),
        FieldSpec("technologies", "refs", ref="technologies"),
    ),
)

SKILLS = CollectionSchema(
    "skills",
    (
        FieldSpec("title", required=True),
        FieldSpec("description"),
        FieldSpec("technologies", "refs", ref="technologies"),
    ),
)

EXPERIENCES = CollectionSchema(
    "experiences",
    (
        FieldSpec("company", required=True),
        FieldSpec("company_logo"),
        FieldSpec("position", required=True),
        FieldSpec("location"),
        FieldSpec("from_date", "date", required=True),
        FieldSpec("to_date", "date"),
        FieldSpec("achievements", "strings"),
    ),
)

CERTIFICATES = CollectionSchema(
    "certificates",
    (
        FieldSpec("title", required=True),
        FieldSpec("issuer", required=True),
        FieldSpec("issued_date", "date", required=True),
        FieldSpec("category", required=True),
        FieldSpec("type", required=True),
        FieldSpec("logo"),
        FieldSpec("description"),
        FieldSpec("skills", "strings"),
        FieldSpec("credential_id"),
        FieldSpec("status", required=True),
        FieldSpec("valid_until", "date"),
        FieldSpec("priority", "number"),
    ),
)

ALL_SCHEMAS = (TECHNOLOGIES, PROJECTS, SKILLS, EXPERIENCES, CERTIFICATES)
