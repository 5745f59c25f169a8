import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so tests can import 'hermes' package
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hermes.crud import MemoryOrderStore, OrderStore
from hermes.db import init_db, make_engine, make_session_factory
from hermes.main import create_app


@pytest.fixture
def app(tmp_path):
    return create_app(f"sqlite:///{tmp_path / 'api.db'}")


@pytest.fixture
def client(app):
    # entering the client runs the lifespan, which creates the tables
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'store.db'}")
    init_db(engine)
    session_factory = make_session_factory(engine)
    with session_factory() as session:
        yield session
    engine.dispose()


@pytest.fixture
def sql_store(db_session):
    return OrderStore(db_session)


@pytest.fixture
def memory_store():
    return MemoryOrderStore()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Run the test against both store implementations"""
    return request.getfixturevalue(f"{request.param}_store")
