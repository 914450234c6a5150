from typing import Any, Dict

from .page import _iso


def normalize_page_version(version, include_snapshot=True) -> Dict[str, Any]:
    data = {
        "id": version.id,
        "page_id": version.page_id,
        "version_number": version.version_number,
        "change_type": version.change_type,
        "change_summary": version.change_summary,
        "created_at": _iso(version.created_at),
        "created_by": version.created_by,
    }

    if include_snapshot:
        data.update({
            "title": version.title,
            "description": version.description,
            "page_type": version.page_type,
            "category": version.category,
            "meta_title": version.meta_title,
            "meta_description": version.meta_description,
            "featured_image": version.featured_image,
            "metadata": version.meta or {},
            "is_published": version.is_published,
        })

    return data


def normalize_comparison(comparison) -> Dict[str, Any]:
    return {
        "version1": normalize_page_version(comparison["version1"]),
        "version2": normalize_page_version(comparison["version2"]),
        "changes": comparison["changes"],
    }
