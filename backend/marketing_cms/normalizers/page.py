from typing import Any, Dict

from marketing_cms.domain.lifecycle.page import page_status


def _iso(value):
    return value.isoformat() if value is not None else None


def normalize_page(page, admin=False) -> Dict[str, Any]:
    data = {
        "id": page.id,
        "slug": page.slug,
        "title": page.title,
        "description": page.description,
        "page_type": page.page_type,
        "category": page.category,
        "meta_title": page.meta_title,
        "meta_description": page.meta_description,
        "featured_image": page.featured_image,
        "metadata": page.meta or {},
        "is_published": page.is_published,
        "status": page_status(page.is_published),
        "published_at": _iso(page.published_at),
    }

    if admin:
        data["created_at"] = _iso(page.created_at)
        data["updated_at"] = _iso(page.updated_at)
        data["created_by"] = page.created_by
        data["updated_by"] = page.updated_by

    return data
