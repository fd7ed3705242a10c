from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from students_api.config import Settings
from students_api.database import build_engine, create_session_factory, create_tables
from students_api.main import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", log_level="WARNING")


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def session() -> Generator[Session]:
    engine = build_engine("sqlite://")
    create_tables(engine)
    db = create_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()
