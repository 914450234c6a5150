import copy
from typing import Any, Dict, List, Mapping, Optional

# Public field name -> model attribute
SNAPSHOT_FIELDS: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "page_type": "page_type",
    "category": "category",
    "meta_title": "meta_title",
    "meta_description": "meta_description",
    "featured_image": "featured_image",
    "metadata": "meta",
    "is_published": "is_published",
}

# Fields a restore copies back onto the page (page_type is fixed at creation)
RESTORABLE_FIELDS = (
    "title",
    "description",
    "category",
    "meta_title",
    "meta_description",
    "featured_image",
    "metadata",
    "is_published",
)

COMPARED_FIELDS = (
    "title",
    "description",
    "category",
    "meta_title",
    "meta_description",
    "featured_image",
    "is_published",
)


def field_value(entity, field: str) -> Any:
    return getattr(entity, SNAPSHOT_FIELDS.get(field, field))


def snapshot_page(page, changes: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Snapshot a page's content-bearing fields, with `changes` merged on top.

    Keys missing from `changes` keep the page's current value. The result is
    keyed by model attribute so it can be passed straight to PageVersion.
    """
    changes = changes or {}
    snapshot: Dict[str, Any] = {}

    for field, attr in SNAPSHOT_FIELDS.items():
        value = changes[field] if field in changes else getattr(page, attr)
        snapshot[attr] = copy.deepcopy(value)

    snapshot["is_published"] = bool(snapshot["is_published"])
    return snapshot


def restorable_fields(version) -> Dict[str, Any]:
    return {
        field: copy.deepcopy(field_value(version, field))
        for field in RESTORABLE_FIELDS
    }


def diff_versions(version1, version2) -> List[Dict[str, Any]]:
    """
    Field-by-field diff; version1 supplies old_value, version2 new_value.
    """
    changes = []
    for field in COMPARED_FIELDS:
        old_value = field_value(version1, field)
        new_value = field_value(version2, field)
        if old_value != new_value:
            changes.append({
                "field": field,
                "old_value": old_value,
                "new_value": new_value,
            })
    return changes


def next_version(latest) -> int:
    return (latest.version_number + 1) if latest else 1
