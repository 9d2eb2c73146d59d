"""Document store implementations."""

from portfoliocms.infrastructure.documents.postgres_store import PostgresDocumentStore
from portfoliocms.infrastructure.documents.schemas import (
    ALL_SCHEMAS,
    CERTIFICATES,
    EXPERIENCES,
    PROJECTS,
    SKILLS,
    TECHNOLOGIES,
    CollectionSchema,
    FieldSpec,
)

__all__ = [
    "PostgresDocumentStore",
    "CollectionSchema",
    "FieldSpec",
    "ALL_SCHEMAS",
    "TECHNOLOGIES",
    "PROJECTS",
    "SKILLS",
    "EXPERIENCES",
    "CERTIFICATES",
]
