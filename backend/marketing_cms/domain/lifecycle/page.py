from typing import Any, Dict, Mapping

# Page states: a page is either a draft or published
DRAFT = "draft"
PUBLISHED = "published"

CHANGE_SUMMARIES: Dict[str, str] = {
    "create": "Initial version",
    "update": "Content updated",
    "publish": "Page published",
    "unpublish": "Page unpublished",
}


def page_status(is_published: bool) -> str:
    return PUBLISHED if is_published else DRAFT


def classify_change(*, current_is_published: bool, changes: Mapping[str, Any]) -> str:
    """
    Classify an update of an existing page.

    Draft -> Published is a "publish", Published -> Draft an "unpublish".
    Anything else, including re-sending the current publish flag, is an
    ordinary "update".
    """
    if "is_published" in changes:
        target = changes["is_published"]
        if target != current_is_published:
            return "publish" if target else "unpublish"
    return "update"


def change_summary(change_type: str) -> str:
    return CHANGE_SUMMARIES[change_type]
