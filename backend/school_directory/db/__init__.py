"""Database connection, models and repositories.

This package holds the process-wide connection manager, the dataclass
models that flow through registration and listing, and the repository
implementations (PostgreSQL for production, in-memory for tests).

Example:
    Use in a service or FastAPI dependency:
        >>> from school_directory.db import database
        >>> repo = database.get_school_repository()
"""
