"""
Infrastructure adapters for the engagement bounded context.

Each adapter implements a domain port (ABC) on top of a
SQLAlchemy engine (SQLite by default, PostgreSQL in production).
"""
