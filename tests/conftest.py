# ruff: noqa: E402
# File: /tests/conftest.py
import pathlib
import sys

# Make repo root importable as "interface_engine"
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from interface_engine.db import Base
from interface_engine.db.session import make_engine
from interface_engine.dependencies import get_db
from interface_engine.main import app

# One shared in-memory connection; the schema is rebuilt per test
engine = make_engine("sqlite://")
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session):
    def _override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_table(db_session):
    """Create a table with typed fields: make_table({"status": "single_select", ...})."""
    from interface_engine.crud import tables as crud_tables
    from interface_engine.schemas.fields import TableCreate, TableFieldCreate

    def _make(fields, name="T", options=None):
        t = crud_tables.create_table(db_session, TableCreate(name=name))
        for i, (fname, ftype) in enumerate(fields.items()):
            crud_tables.create_field(
                db_session,
                t.id,
                TableFieldCreate(
                    name=fname, type=ftype, order_index=i, options=(options or {}).get(fname)
                ),
            )
        return t

    return _make
