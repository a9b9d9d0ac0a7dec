"""
FastAPI dependency injection providers.

Routes receive the engine through `Depends(get_db_engine)` so tests can point
them at a throwaway database with app.dependency_overrides.
"""

from __future__ import annotations

from typing import Generator

from sqlalchemy.engine import Engine

from retreat_booking.db.engine import engine


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> test_engine = create_engine("sqlite+pysqlite:///:memory:")
        >>> app.dependency_overrides[get_db_engine] = lambda: test_engine
        >>> client = TestClient(app)
        >>> client.get("/reservations/1")
    """
    yield engine
