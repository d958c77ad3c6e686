"""
Use case: Run the recommendation pipeline for a newly persisted message.

Input: IngestMessageCommand (conversation_id, role, text, created_at)
Output: IngestMessageResult
Side effects: Appends a feature record, upserts the score state.
Failure cases: None. Every engine failure is logged, reported as a
    warning and turned into "no recommendation"; the chat message
    itself is never blocked.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone

from mode_advisor.application.engagement.conversation_locks import ConversationLockRegistry
from mode_advisor.application.engagement.dtos import (
    IngestMessageCommand,
    IngestMessageResult,
    ModeSuggestionResult,
)
from mode_advisor.domain.engagement.entities import (
    ConversationScoreState,
    DismissalState,
    MessageRole,
    RecommendationDecision,
)
from mode_advisor.domain.engagement.errors import CorruptScoreStateError, OutOfOrderFoldError
from mode_advisor.domain.engagement.feature_extractor import MessageFeatureExtractor
from mode_advisor.domain.engagement.mode_recommender import ModeRecommender
from mode_advisor.domain.engagement.ports import (
    DismissalRepository,
    MetricsStore,
    ScoreStateRepository,
)
from mode_advisor.domain.engagement.score_aggregator import ScoreAggregator
from mode_advisor.domain.engagement.suggestion_gate import SuggestionGate

logger = logging.getLogger(__name__)


class IngestMessageUseCase:
    """Orchestrates extract -> fold -> store -> recommend -> gate.

    Runs synchronously under the conversation's lock so folds happen in
    message-creation order.
    """

    def __init__(
        self,
        metrics_store: MetricsStore,
        score_repo: ScoreStateRepository,
        dismissal_repo: DismissalRepository,
        extractor: MessageFeatureExtractor,
        aggregator: ScoreAggregator,
        recommender: ModeRecommender,
        gate: SuggestionGate,
        locks: ConversationLockRegistry,
    ) -> None:
        self._metrics_store = metrics_store
        self._score_repo = score_repo
        self._dismissal_repo = dismissal_repo
        self._extractor = extractor
        self._aggregator = aggregator
        self._recommender = recommender
        self._gate = gate
        self._locks = locks

    def execute(self, command: IngestMessageCommand) -> IngestMessageResult:
        """Run the ingestion pipeline.

        Args:
            command: The persisted message.

        Returns:
            Whether the message was folded, the suggestion it surfaced (if
            any) and non-fatal warnings.
        """
        conversation_id = command.conversation_id
        warnings: list[str] = []

        with self._locks.hold(conversation_id):
            try:
                return self._run(command, warnings)
            except OutOfOrderFoldError as exc:
                logger.warning("Skipping message: %s", exc.message)
                warnings.append("Message predates the last folded message and was skipped.")
                return IngestMessageResult(
                    conversation_id=conversation_id,
                    folded=False,
                    warnings=tuple(warnings),
                )
            except Exception:
                logger.exception(
                    "Recommendation pipeline failed for conversation=%s", conversation_id
                )
                warnings.append("Recommendation engine unavailable for this message.")
                return IngestMessageResult(
                    conversation_id=conversation_id,
                    folded=False,
                    warnings=tuple(warnings),
                )

    def _run(self, command: IngestMessageCommand, warnings: list[str]) -> IngestMessageResult:
        conversation_id = command.conversation_id
        command = replace(command, created_at=_as_utc(command.created_at))
        state, stored_version = self._load_state(conversation_id, warnings)

        if MessageRole(command.role) is not MessageRole.USER:
            # Only the clock moves; the next user reply is timed from here.
            base = state or ConversationScoreState(conversation_id=conversation_id)
            if base.last_message_at is not None and command.created_at < base.last_message_at:
                return IngestMessageResult(
                    conversation_id=conversation_id, folded=False, warnings=tuple(warnings)
                )
            touched = replace(base, last_message_at=command.created_at)
            self._save_state(touched, stored_version, warnings)
            return IngestMessageResult(
                conversation_id=conversation_id, folded=False, warnings=tuple(warnings)
            )

        record = self._extractor.extract(
            conversation_id,
            command.text,
            command.created_at,
            state.last_message_at if state else None,
        )

        folded = self._aggregator.fold(state, record)

        try:
            self._metrics_store.append(record)
        except Exception:
            logger.warning(
                "Feature record not persisted for conversation=%s",
                conversation_id,
                exc_info=True,
            )
            warnings.append("Message metrics could not be stored.")

        candidate = self._recommender.recommend(folded)
        dismissal = self._load_dismissal(conversation_id, warnings)
        if dismissal is None:
            decision, gated = RecommendationDecision.none("Dismissal history unavailable."), folded
        else:
            decision, gated = self._gate.gate(
                candidate, folded, dismissal, command.created_at
            )

        if not self._save_state(gated, stored_version, warnings):
            decision = RecommendationDecision.none("Score state could not be stored.")

        logger.debug(
            "Folded message: conversation=%s count=%d hurried=%.1f analytical=%.1f "
            "conversational=%.1f candidate=%s shown=%s",
            conversation_id,
            gated.message_count,
            gated.hurried_score,
            gated.analytical_score,
            gated.conversational_score,
            candidate.recommended_mode,
            decision.should_show,
        )

        suggestion = None
        if decision.should_show and decision.recommended_mode is not None:
            logger.info(
                "Surfacing mode=%s for conversation=%s",
                decision.recommended_mode.value,
                conversation_id,
            )
            suggestion = ModeSuggestionResult(
                recommended_mode=decision.recommended_mode.value,
                reason=decision.reason,
            )

        return IngestMessageResult(
            conversation_id=conversation_id,
            folded=True,
            suggestion=suggestion,
            warnings=tuple(warnings),
        )

    def _load_state(
        self, conversation_id: str, warnings: list[str]
    ) -> tuple[ConversationScoreState | None, int]:
        """Return the prior state and its stored version; corrupt rows start fresh."""
        try:
            state = self._score_repo.get(conversation_id)
        except CorruptScoreStateError as exc:
            logger.warning("Discarding score state: %s", exc.message)
            warnings.append("Previous scores were unreadable and have been reset.")
            return None, exc.stored_version
        return state, state.version if state else 0

    def _load_dismissal(
        self, conversation_id: str, warnings: list[str]
    ) -> DismissalState | None:
        """Return the dismissal state; None means nothing may be surfaced."""
        try:
            return self._dismissal_repo.get(conversation_id)
        except Exception:
            logger.warning(
                "Dismissal state unavailable for conversation=%s",
                conversation_id,
                exc_info=True,
            )
            warnings.append("Dismissal history unavailable.")
            return None

    def _save_state(
        self, state: ConversationScoreState, expected_version: int, warnings: list[str]
    ) -> bool:
        try:
            self._score_repo.save(state, expected_version=expected_version)
        except Exception:
            logger.warning(
                "Score state not persisted for conversation=%s",
                state.conversation_id,
                exc_info=True,
            )
            warnings.append("Conversation scores could not be stored.")
            return False
        return True


def _as_utc(value: datetime) -> datetime:
    """Read naive timestamps as UTC so they compare with stored ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
