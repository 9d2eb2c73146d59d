"""Mutation orchestrator and entity strategies."""

from portfoliocms.application.mutations.orchestrator import MutationOrchestrator, MutationRequest
from portfoliocms.application.mutations.strategies import (
    CertificateStrategy,
    EntityStrategy,
    ExperienceStrategy,
    ProjectStrategy,
    SkillStrategy,
    TechnologyStrategy,
)

__all__ = [
    "MutationOrchestrator",
    "MutationRequest",
    "EntityStrategy",
    "ProjectStrategy",
    "ExperienceStrategy",
    "CertificateStrategy",
    "TechnologyStrategy",
    "SkillStrategy",
]
