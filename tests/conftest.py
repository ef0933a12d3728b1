from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from stats_server.db.base import Base
from stats_server.db.session import get_db
from stats_server.models import APIKey, Submission
from stats_server.core.security import generate_api_key, hash_api_key


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite://"


@pytest.fixture()
def db_session():
    """Per-test SQLite in-memory session."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def client(db_session):
    """TestClient with DB override."""
    from stats_server.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def seed_submissions(db_session):
    """Seed 10 installations; two of them were last updated long ago."""
    now = datetime.utcnow()
    rows = [
        # unique_id, php, db_type, db_version, cms, server_os, age in days
        ("site-01", "7.4.1", "mysql", "5.7.30", "3.9.1", "Linux 5.4", 1),
        ("site-02", "7.4.9", "mysql", "5.7.31", "3.9.2", "Linux 4.19", 2),
        ("site-03", "8.0.0", "mysqli", "8.0.21", "3.9.2", "Windows NT 10.0", 3),
        ("site-04", "8.0.3", "postgresql", "12.4", "4.0.0", "Linux 5.10", 5),
        ("site-05", "7.3.22", "mysql", "10.4.14", "3.10.0", "Darwin 19.6.0", 8),
        ("site-06", "7.4.2", "mysqli", "5.7.30", "3.9.1", "", 13),
        ("site-07", "8.1.0", "mysql", "8.0.22", "4.0.1", "Linux 5.15", 21),
        ("site-08", "7.2.34", "pgsql", "11.9", "3.9.0", "FreeBSD 12.1", 34),
        ("site-09", "5.6.40", "mysql", "5.5.62", "3.8.13", "Linux 2.6", 400),
        ("site-10", "7.0.33", "mysql", "5.6.49", "3.8.11", None, 500),
    ]
    submissions = [
        Submission(
            unique_id=uid,
            php_version=php,
            db_type=db_type,
            db_version=db_version,
            cms_version=cms,
            server_os=server_os,
            modified=now - timedelta(days=age),
        )
        for uid, php, db_type, db_version, cms, server_os, age in rows
    ]
    db_session.add_all(submissions)
    db_session.commit()
    return submissions


@pytest.fixture()
def api_key(db_session):
    """Create an active raw-data API key and return the raw value."""
    raw_key = generate_api_key()
    db_session.add(APIKey(key_hash=hash_api_key(raw_key), key_prefix=raw_key[:8], name="tests"))
    db_session.commit()
    return raw_key


@pytest.fixture()
def raw_headers(api_key):
    return {"X-API-Key": api_key}
