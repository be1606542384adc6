"""
Storefront tests.

API tests run against an in-memory SQLite catalog and a MemorySessionStore;
Redis and Celery are replaced with mocks or eager execution.

Run: pytest tests/ -v
"""
