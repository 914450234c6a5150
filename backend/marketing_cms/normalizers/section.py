from .block import normalize_block
from .page import _iso


def normalize_section(section, admin=False, blocks=None):
    """
    Serialize a section. `blocks`, when given, is the already-filtered
    block list to embed (public views pass only visible blocks).
    """
    data = {
        "id": section.id,
        "type": section.type,
        "title": section.title,
        "subtitle": section.subtitle,
        "order": section.order,
        "settings": section.settings or {},
    }

    if admin:
        data["page_id"] = section.page_id
        data["is_visible"] = section.is_visible
        data["created_at"] = _iso(section.created_at)
        data["updated_at"] = _iso(section.updated_at)

    if blocks is not None:
        data["blocks"] = [
            normalize_block(b, admin=admin) for b in sorted(blocks, key=lambda b: b.order)
        ]

    return data
