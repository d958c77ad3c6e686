"""
Domain service: Mode recommendation with hysteresis.

Decides which interface mode the current scores favor and whether that
differs from the mode last surfaced to the user. It never decides whether
anything is shown; that is the suggestion gate's job.

Rules:
    - quick <- hurried, dense <- analytical, hybrid <- conversational
    - the governing axis must be strictly highest, above the activation
      threshold, and ahead of the runner-up by the dominance margin
    - nothing fires before ``min_messages`` folded messages, nor within
      ``min_messages`` of the last surfaced suggestion
    - once quick or dense was surfaced and every axis has cooled below the
      release threshold, the candidate settles back to hybrid
    - re-suggesting the last surfaced mode is "no change"

No framework imports. No IO. No side effects.
"""

from typing import Optional, assert_never

from mode_advisor.domain.engagement.entities import (
    ConversationScoreState,
    EngineTuning,
    InterfaceMode,
    RecommendationDecision,
    governing_axis,
    mode_for_axis,
    mode_label,
)

REASON_WARMING_UP = "Not enough messages yet to judge the conversation style."
REASON_TOO_SOON = "A suggestion was made recently; waiting for more messages."
REASON_NO_DOMINANT_AXIS = "Your conversation style is balanced across modes."
REASON_NO_CHANGE = "Your current mode works well for this conversation style."


class ModeRecommender:
    """Domain service mapping a score state to a candidate decision."""

    def __init__(self, tuning: EngineTuning | None = None) -> None:
        self._tuning = tuning or EngineTuning()

    def recommend(self, state: ConversationScoreState) -> RecommendationDecision:
        """Return the candidate decision for the current scores.

        Args:
            state: The conversation's current score state.

        Returns:
            A candidate with ``should_show`` False; ``recommended_mode`` is
            None when nothing should change.
        """
        if state.message_count < self._tuning.min_messages:
            return RecommendationDecision.none(REASON_WARMING_UP)

        if (
            state.suggestion_message_count is not None
            and state.message_count - state.suggestion_message_count
            < self._tuning.min_messages
        ):
            return RecommendationDecision.none(REASON_TOO_SOON)

        mode = self._dominant_mode(state)
        settling = False
        if mode is None and self._has_cooled_down(state):
            mode = InterfaceMode.HYBRID
            settling = True

        if mode is None:
            return RecommendationDecision.none(REASON_NO_DOMINANT_AXIS)
        if mode == state.last_recommended_mode:
            return RecommendationDecision.none(REASON_NO_CHANGE)

        return RecommendationDecision(
            recommended_mode=mode,
            reason=_reason(mode, state, settling),
            should_show=False,
        )

    def _dominant_mode(self, state: ConversationScoreState) -> Optional[InterfaceMode]:
        ranked = sorted(state.scores.items(), key=lambda item: item[1], reverse=True)
        (top_axis, top_score), (_, runner_up) = ranked[0], ranked[1]

        if top_score <= runner_up:
            return None
        if top_score <= self._tuning.activation_threshold:
            return None
        if top_score - runner_up < self._tuning.dominance_margin:
            return None
        return mode_for_axis(top_axis)

    def _has_cooled_down(self, state: ConversationScoreState) -> bool:
        if state.last_recommended_mode not in (InterfaceMode.QUICK, InterfaceMode.DENSE):
            return False
        release = self._tuning.release_threshold
        return all(score < release for score in state.scores.values())


def _reason(mode: InterfaceMode, state: ConversationScoreState, settling: bool) -> str:
    axis = governing_axis(mode)
    signal = f"({axis.value} score {state.score_for(axis):.0f})"
    label = mode_label(mode)
    match mode:
        case InterfaceMode.QUICK:
            return (
                f"You seem to be looking for quick answers {signal}. "
                f"{label} gets you there faster."
            )
        case InterfaceMode.DENSE:
            return (
                f"Your questions have gotten more technical {signal}. "
                f"{label} offers multi-panel analytics for this level of detail."
            )
        case InterfaceMode.HYBRID if settling:
            return (
                "Your conversation style is balanced again. "
                f"{label} balances conversation with data visualization."
            )
        case InterfaceMode.HYBRID:
            return (
                f"You're enjoying a relaxed back-and-forth {signal}. "
                f"{label} pairs the chat with your portfolio dashboard."
            )
        case _:
            assert_never(mode)
