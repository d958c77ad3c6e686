"""
Dependency injection for the engagement bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters and domain services into use cases via constructor injection.
These are the composition root for the engagement context.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.engine import Engine

from mode_advisor.application.engagement.conversation_locks import ConversationLockRegistry
from mode_advisor.application.engagement.dismiss_suggestion import DismissSuggestionUseCase
from mode_advisor.application.engagement.get_conversation_context import (
    GetConversationContextUseCase,
)
from mode_advisor.application.engagement.get_mode_suggestion import GetModeSuggestionUseCase
from mode_advisor.application.engagement.ingest_message import IngestMessageUseCase
from mode_advisor.core.config import settings
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
from mode_advisor.infrastructure.engagement.schema import build_engine
from mode_advisor.infrastructure.engagement.score_state_repository import (
    ScoreStateRepositoryAdapter,
)


@lru_cache
def get_engine() -> Engine:
    """Build the SQLAlchemy engine once from application settings."""
    return build_engine(settings.database_url)


@lru_cache
def get_tuning() -> EngineTuning:
    """Engine constants from application settings."""
    return settings.engine_tuning()


@lru_cache
def get_lock_registry() -> ConversationLockRegistry:
    """Process-wide per-conversation lock registry."""
    return ConversationLockRegistry()


def get_ingest_message_use_case(
    engine: Engine = Depends(get_engine),
    tuning: EngineTuning = Depends(get_tuning),
    locks: ConversationLockRegistry = Depends(get_lock_registry),
) -> IngestMessageUseCase:
    """Build IngestMessageUseCase with its infrastructure dependencies."""
    return IngestMessageUseCase(
        metrics_store=MessageMetricsRepositoryAdapter(engine=engine),
        score_repo=ScoreStateRepositoryAdapter(engine=engine),
        dismissal_repo=DismissalRepositoryAdapter(engine=engine),
        extractor=MessageFeatureExtractor(),
        aggregator=ScoreAggregator(tuning),
        recommender=ModeRecommender(tuning),
        gate=SuggestionGate(tuning),
        locks=locks,
    )


def get_mode_suggestion_use_case(
    engine: Engine = Depends(get_engine),
    tuning: EngineTuning = Depends(get_tuning),
) -> GetModeSuggestionUseCase:
    """Build GetModeSuggestionUseCase with its infrastructure dependencies."""
    return GetModeSuggestionUseCase(
        score_repo=ScoreStateRepositoryAdapter(engine=engine),
        dismissal_repo=DismissalRepositoryAdapter(engine=engine),
        gate=SuggestionGate(tuning),
    )


def get_dismiss_suggestion_use_case(
    engine: Engine = Depends(get_engine),
    tuning: EngineTuning = Depends(get_tuning),
    locks: ConversationLockRegistry = Depends(get_lock_registry),
) -> DismissSuggestionUseCase:
    """Build DismissSuggestionUseCase with its infrastructure dependencies."""
    return DismissSuggestionUseCase(
        score_repo=ScoreStateRepositoryAdapter(engine=engine),
        dismissal_repo=DismissalRepositoryAdapter(engine=engine),
        gate=SuggestionGate(tuning),
        locks=locks,
    )


def get_conversation_context_use_case(
    engine: Engine = Depends(get_engine),
) -> GetConversationContextUseCase:
    """Build GetConversationContextUseCase with its infrastructure dependencies."""
    return GetConversationContextUseCase(
        score_repo=ScoreStateRepositoryAdapter(engine=engine),
        metrics_store=MessageMetricsRepositoryAdapter(engine=engine),
    )
