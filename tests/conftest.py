"""
Marketing CMS test suite: shared fixtures.

Run:  pytest tests/ -v

Every test gets a fresh in-memory SQLite database and an app context that
stays pushed for the whole test, so store calls and test-client requests
share one session.
"""

from __future__ import annotations

from typing import Callable, Dict

import pytest
from flask_jwt_extended import create_access_token

from marketing_cms import create_app
from marketing_cms.application.cms import PageContentStore, VersionedPageStore
from marketing_cms.extensions import db
from marketing_cms.storage import SQLAlchemyPageStorage


@pytest.fixture
def app():
    app = create_app("testing")

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def store(app) -> VersionedPageStore:
    return VersionedPageStore(SQLAlchemyPageStorage())


@pytest.fixture
def content_store(app) -> PageContentStore:
    return PageContentStore(SQLAlchemyPageStorage())


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app) -> Callable[..., Dict[str, str]]:
    """Build bearer headers for a user holding `role`."""

    def _headers(role: str = "editor", user_id: str = "user-1") -> Dict[str, str]:
        token = create_access_token(identity=user_id, additional_claims={"role": role})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_page(store) -> Callable[..., object]:
    """Create a page with sensible defaults."""

    def _make(slug: str = "home", title: str = "Home", **fields):
        actor_id = fields.pop("actor_id", "author-1")
        data = {"slug": slug, "title": title}
        data.update(fields)
        return store.create_page(data, actor_id=actor_id)

    return _make
