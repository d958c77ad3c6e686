"""
Engagement bounded context, domain layer.

This module contains all domain logic of the recommendation engine:
- Message feature extraction
- Rolling score aggregation
- Mode recommendation with hysteresis
- Suggestion gating (cooldowns, dismissals)
"""
