"""
Domain service: Suggestion gating.

Applies presentation-layer suppression on top of a ModeRecommender
candidate. The gate is pure: dismissal state comes in as a value object
and the surfaced suggestion is recorded on the returned score state.

A candidate is suppressed when:
    - the user dismissed a suggestion less than one cooldown ago
    - a suggestion was surfaced less than one cooldown ago
    - the candidate mode was dismissed earlier in the same session
"""

from dataclasses import replace
from datetime import datetime, timedelta

from mode_advisor.domain.engagement.entities import (
    ConversationScoreState,
    DismissalState,
    EngineTuning,
    InterfaceMode,
    RecommendationDecision,
)

REASON_DISMISSED_RECENTLY = "A suggestion was dismissed recently."
REASON_SHOWN_RECENTLY = "A suggestion was shown recently."
REASON_MODE_REJECTED = "This mode was already declined in this session."


class SuggestionGate:
    """Domain service deciding whether a candidate reaches the user."""

    def __init__(self, tuning: EngineTuning | None = None) -> None:
        self._tuning = tuning or EngineTuning()

    @property
    def cooldown(self) -> timedelta:
        return timedelta(seconds=self._tuning.suggestion_cooldown_seconds)

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(hours=self._tuning.dismissal_ttl_hours)

    def gate(
        self,
        candidate: RecommendationDecision,
        state: ConversationScoreState,
        dismissal: DismissalState,
        now: datetime,
    ) -> tuple[RecommendationDecision, ConversationScoreState]:
        """Decide whether a candidate is surfaced.

        Args:
            candidate: Output of the mode recommender.
            state: Current score state of the conversation.
            dismissal: What the user rejected in this conversation.
            now: Decision time.

        Returns:
            The final decision and the score state to persist. When the
            candidate is surfaced, the state records it as the last and
            pending suggestion; otherwise the state is returned unchanged.
        """
        mode = candidate.recommended_mode
        if mode is None:
            return candidate, state

        if dismissal.dismissed_at is not None and now - dismissal.dismissed_at < self.cooldown:
            return _suppressed(mode, REASON_DISMISSED_RECENTLY), state

        if state.last_suggestion_at is not None and now - state.last_suggestion_at < self.cooldown:
            return _suppressed(mode, REASON_SHOWN_RECENTLY), state

        if mode in self.active_dismissals(dismissal, now):
            return _suppressed(mode, REASON_MODE_REJECTED), state

        surfaced = replace(candidate, should_show=True)
        return surfaced, replace(
            state,
            last_recommended_mode=mode,
            last_suggestion_at=now,
            suggestion_message_count=state.message_count,
            pending_mode=mode,
            pending_reason=candidate.reason,
        )

    def active_dismissals(
        self, dismissal: DismissalState, now: datetime
    ) -> frozenset[InterfaceMode]:
        """Return the modes still rejected for this session."""
        if dismissal.dismissed_at is None:
            return frozenset()
        if now - dismissal.dismissed_at >= self.session_ttl:
            return frozenset()
        return dismissal.dismissed_modes

    def dismiss(
        self, dismissal: DismissalState, mode: InterfaceMode, now: datetime
    ) -> DismissalState:
        """Record a rejection, starting a new session if the old one expired."""
        return replace(
            dismissal,
            dismissed_modes=self.active_dismissals(dismissal, now) | {mode},
            dismissed_at=now,
        )


def _suppressed(mode: InterfaceMode, reason: str) -> RecommendationDecision:
    return RecommendationDecision(recommended_mode=mode, reason=reason, should_show=False)
