"""Assembly of the mutation orchestrator from configured clients."""

from __future__ import annotations

from functools import lru_cache

from portfoliocms.application.attachments import AttachmentPolicy
from portfoliocms.application.mutations import (
    CertificateStrategy,
    ExperienceStrategy,
    MutationOrchestrator,
    ProjectStrategy,
    SkillStrategy,
    TechnologyStrategy,
)
from portfoliocms.application.ports.blob_store import BlobStore
from portfoliocms.infrastructure.blobs import s3_store_from_settings
from portfoliocms.infrastructure.documents import (
    CERTIFICATES,
    EXPERIENCES,
    PROJECTS,
    SKILLS,
    TECHNOLOGIES,
    PostgresDocumentStore,
)
from portfoliocms.infrastructure.postgres_client import PostgresClientWrapper, get_postgres_client
from portfoliocms.infrastructure.settings import Settings, get_settings


def build_orchestrator(
    settings: Settings,
    postgres: PostgresClientWrapper,
    blob_store: BlobStore,
) -> MutationOrchestrator:
    strategies = [
        ProjectStrategy(PostgresDocumentStore(postgres, PROJECTS), settings.thumbnail_folder),
        ExperienceStrategy(PostgresDocumentStore(postgres, EXPERIENCES), settings.company_logo_folder),
        CertificateStrategy(PostgresDocumentStore(postgres, CERTIFICATES), settings.certificate_logo_folder),
        TechnologyStrategy(PostgresDocumentStore(postgres, TECHNOLOGIES)),
        SkillStrategy(PostgresDocumentStore(postgres, SKILLS)),
    ]
    return MutationOrchestrator(
        blob_store=blob_store,
        strategies={strategy.kind: strategy for strategy in strategies},
        attachment_policy=AttachmentPolicy(match=settings.attachment_match_policy),
    )


@lru_cache
def get_orchestrator() -> MutationOrchestrator:
    """Get the process-wide orchestrator."""
    settings = get_settings()
    return build_orchestrator(settings, get_postgres_client(), s3_store_from_settings(settings))
