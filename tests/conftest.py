"""
Shared fixtures for the engagement test suite.

Every test that needs storage gets its own in-memory SQLite database.
"""

import pytest

from mode_advisor.application.engagement.conversation_locks import ConversationLockRegistry
from mode_advisor.application.engagement.ingest_message import IngestMessageUseCase
from mode_advisor.domain.engagement.entities import EngineTuning
from mode_advisor.domain.engagement.feature_extractor import MessageFeatureExtractor
from mode_advisor.domain.engagement.mode_recommender import ModeRecommender
from mode_advisor.domain.engagement.score_aggregator import ScoreAggregator
from mode_advisor.domain.engagement.suggestion_gate import SuggestionGate
from mode_advisor.infrastructure.engagement.dismissal_repository import (
    DismissalRepositoryAdapter,
)
from mode_advisor.infrastructure.engagement.message_metrics_repository import (
    MessageMetricsRepositoryAdapter,
)
from mode_advisor.infrastructure.engagement.schema import build_engine, create_schema
from mode_advisor.infrastructure.engagement.score_state_repository import (
    ScoreStateRepositoryAdapter,
)


@pytest.fixture
def engine():
    """Fresh in-memory database with the engagement tables."""
    engine = build_engine("sqlite://")
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def tuning() -> EngineTuning:
    return EngineTuning()


@pytest.fixture
def locks() -> ConversationLockRegistry:
    return ConversationLockRegistry()


@pytest.fixture
def metrics_store(engine) -> MessageMetricsRepositoryAdapter:
    return MessageMetricsRepositoryAdapter(engine=engine)


@pytest.fixture
def score_repo(engine) -> ScoreStateRepositoryAdapter:
    return ScoreStateRepositoryAdapter(engine=engine)


@pytest.fixture
def dismissal_repo(engine) -> DismissalRepositoryAdapter:
    return DismissalRepositoryAdapter(engine=engine)


@pytest.fixture
def ingest(metrics_store, score_repo, dismissal_repo, tuning, locks) -> IngestMessageUseCase:
    """Ingestion use case wired to the in-memory adapters."""
    return IngestMessageUseCase(
        metrics_store=metrics_store,
        score_repo=score_repo,
        dismissal_repo=dismissal_repo,
        extractor=MessageFeatureExtractor(),
        aggregator=ScoreAggregator(tuning),
        recommender=ModeRecommender(tuning),
        gate=SuggestionGate(tuning),
        locks=locks,
    )
