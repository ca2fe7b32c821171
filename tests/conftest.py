from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from labscore.config import settings
from labscore.database import Base, get_db
from labscore.main import app
from labscore.routers.deps import get_health_analyzer
from labscore.schemas.biomarker import BiomarkerReading
from labscore.services.ai_analyzer import AIHealthAnalyzer
from labscore.services.analyzer import LocalHealthAnalyzer
from labscore.services.cache import AnalysisCache
from labscore.services.catalog import build_reference_catalog


@pytest.fixture(autouse=True)
def no_llm(monkeypatch):
    # Never reach a real model from tests, whatever the environment says.
    monkeypatch.setattr(settings, "openai_api_key", None)


@pytest.fixture()
def catalog():
    return build_reference_catalog()


@pytest.fixture()
def local_analyzer(catalog) -> LocalHealthAnalyzer:
    return LocalHealthAnalyzer(catalog)


@pytest.fixture()
def reading():
    def _make(name: str, value: float, is_abnormal: bool = False, unit: str = "mg/dL", **kwargs) -> BiomarkerReading:
        return BiomarkerReading(name=name, value=value, unit=unit, is_abnormal=is_abnormal, **kwargs)

    return _make


@pytest.fixture()
def db_session() -> Generator:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session, local_analyzer) -> Generator[TestClient, None, None]:
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    analyzer = AIHealthAnalyzer(local_analyzer=local_analyzer, cache=AnalysisCache(ttl_seconds=600))
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_health_analyzer] = lambda: analyzer

    # Tests use an in-memory DB via dependency override; skip app startup side effects.
    original_startup = list(app.router.on_startup)
    app.router.on_startup.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.router.on_startup[:] = original_startup
    app.dependency_overrides.clear()
