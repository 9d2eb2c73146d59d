from unittest.mock import MagicMock

from portfoliocms.domain import EntityKind
from portfoliocms.infrastructure import PostgresClientWrapper, Settings, build_orchestrator


def test_every_collection_gets_a_strategy_bound_to_its_table() -> None:
    settings = Settings(attachment_match_policy="all", thumbnail_folder="thumbs")

    orchestrator = build_orchestrator(settings, MagicMock(spec=PostgresClientWrapper), MagicMock())

    assert set(orchestrator.strategies) == set(EntityKind)
    for kind, strategy in orchestrator.strategies.items():
        assert strategy.store.collection == kind.value
    assert orchestrator.strategy_for(EntityKind.PROJECT).folder == "thumbs"
    assert orchestrator.strategy_for(EntityKind.SKILL).folder is None
    assert orchestrator.attachment_policy.match == "all"
