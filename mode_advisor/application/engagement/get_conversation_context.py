"""
Use case: Describe a conversation's current behavioral profile.

Input: GetConversationContextQuery (conversation_id)
Output: ConversationContextResult
Side effects: None (read-only query).
Failure cases: ConversationNotFoundError.
"""

import logging

from mode_advisor.application.engagement.dtos import (
    ConversationContextResult,
    GetConversationContextQuery,
)
from mode_advisor.domain.engagement.errors import ConversationNotFoundError
from mode_advisor.domain.engagement.ports import MetricsStore, ScoreStateRepository

logger = logging.getLogger(__name__)


class GetConversationContextUseCase:
    """Reads scores and message metrics for one conversation."""

    def __init__(self, score_repo: ScoreStateRepository, metrics_store: MetricsStore) -> None:
        self._score_repo = score_repo
        self._metrics_store = metrics_store

    def execute(self, query: GetConversationContextQuery) -> ConversationContextResult:
        """Run the context query.

        Args:
            query: The conversation to describe.

        Returns:
            Scores, counts, average response time and mode history.

        Raises:
            ConversationNotFoundError: If the conversation has no score state.
        """
        logger.info("Reading context for conversation=%s", query.conversation_id)

        state = self._score_repo.get(query.conversation_id)
        if state is None:
            raise ConversationNotFoundError(query.conversation_id)

        response_times = [
            r.response_time_seconds
            for r in self._metrics_store.list_for_conversation(query.conversation_id)
            if r.response_time_seconds is not None
        ]
        avg_response_time = (
            round(sum(response_times) / len(response_times)) if response_times else None
        )

        return ConversationContextResult(
            conversation_id=state.conversation_id,
            hurried_score=round(state.hurried_score, 2),
            analytical_score=round(state.analytical_score, 2),
            conversational_score=round(state.conversational_score, 2),
            message_count=state.message_count,
            avg_response_time_seconds=avg_response_time,
            last_recommended_mode=(
                state.last_recommended_mode.value if state.last_recommended_mode else None
            ),
            pending_mode=state.pending_mode.value if state.pending_mode else None,
        )
