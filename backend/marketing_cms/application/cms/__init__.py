from flask import current_app

from marketing_cms.storage import SQLAlchemyPageStorage
from .content_store import PageContentStore
from .page_store import VersionedPageStore


def get_page_store() -> VersionedPageStore:
    """Build a store bound to the current app's session and settings."""
    return VersionedPageStore(
        SQLAlchemyPageStorage(),
        attribution_enabled=current_app.config.get("PAGE_ATTRIBUTION_ENABLED", True),
    )


def get_content_store() -> PageContentStore:
    return PageContentStore(SQLAlchemyPageStorage())


__all__ = ["PageContentStore", "VersionedPageStore", "get_content_store", "get_page_store"]
