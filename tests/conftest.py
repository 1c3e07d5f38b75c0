"""
Fixtures partagées — DB SQLite temporaire par test + jeu de données landing.
"""
import sys, os, tempfile
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DB_PATH", os.path.join(tempfile.mkdtemp(), "pagelab-test.db"))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


@pytest.fixture
def session_factory(tmp_path):
    from pagelab.database import init_db
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    init_db(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    from pagelab.database import DocumentStore
    db = session_factory()
    try:
        yield DocumentStore(db)
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    """Client de test branché sur la DB temporaire."""
    from fastapi.testclient import TestClient
    from pagelab.api.main import app
    from pagelab.database import get_db

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def landing(store):
    """
    Page "home" (hero + 3 blocs content dont 2 références + footer), page "other",
    3 variants (control sans override, treatment avec overrides, un variant de "other"),
    expérience exp-1 running 50/50 sur "home".
    """
    store.create("reusable-blocks", {
        "id": "R1", "title": "Promo", "blockType": "content",
        "block": [{
            "blockType": "contentBlock", "body": {"root": {"text": "Promo"}},
            "settings": {"blockId": "src-block-01", "analyticsLabel": "promo-source"},
        }],
    })
    store.create("reusable-blocks", {"id": "R-empty", "title": "Vide", "blockType": "faq", "block": []})
    store.create("pages", {
        "id": "page-home", "slug": "home", "title": "Accueil",
        "hero": [{"blockType": "heroBlock", "headline": "Bienvenue", "settings": {"blockId": "hero-base-01"}}],
        "content": [
            {"blockType": "contentBlock", "body": {"root": {"text": "Inline"}}, "settings": {"blockId": "inline-x-01"}},
            {"blockType": "reusableBlockRef", "block": "R1", "settings": {"blockId": "ref-block-01"}},
            {"blockType": "reusableBlockRef", "block": "R-empty"},
        ],
        "footer": [{"blockType": "footerBlock", "text": "© 2026"}],
    })
    store.create("pages", {"id": "page-other", "slug": "other", "title": "Autre"})
    store.create("page-variants", {"id": "var-a", "name": "Control", "page": "page-home", "status": "active"})
    store.create("page-variants", {
        "id": "var-b", "name": "Treatment", "page": "page-home", "status": "active",
        "heroOverride": [{"blockType": "heroBlock", "headline": "Nouvelle offre"}],
        "contentOverride": [{"blockType": "reusableBlockRef", "block": "R1", "settings": {"blockId": "override-ref"}}],
    })
    store.create("page-variants", {"id": "var-other", "name": "Autre", "page": "page-other"})
    store.create("experiments", {
        "id": "exp-1", "name": "Hero test", "page": "page-home", "status": "running",
        "variants": [
            {"variant": "var-a", "trafficPercent": 50},
            {"variant": "var-b", "trafficPercent": 50},
        ],
    })
    return store
