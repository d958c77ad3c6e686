"""Timestamps and message fixtures shared by the engagement tests."""

from datetime import datetime, timedelta, timezone

T0 = datetime(2025, 1, 6, 10, 0, tzinfo=timezone.utc)

HURRIED_MESSAGES = ["ok", "yes", "sure", "now"]
SHARPE_QUESTION = (
    "What's my portfolio beta and Sharpe ratio relative to the S&P, "
    "and how should I think about rebalancing given current volatility?"
)


def at(seconds: float) -> datetime:
    """T0 shifted by a number of seconds."""
    return T0 + timedelta(seconds=seconds)
