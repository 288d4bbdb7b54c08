"""
Integration tests package.

Tests that run against a real SQLAlchemy engine (in-memory SQLite):
- SQL repositories and row locking
- Transaction rollback, nested scopes included
- Deadlock retry around whole transactions

To run only integration tests:
    pytest tests/integration/
"""
