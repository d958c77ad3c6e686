"""
Application layer for the engagement bounded context.

Use cases coordinate domain services and ports to run the
recommendation pipeline. No framework or infrastructure imports allowed.
"""
