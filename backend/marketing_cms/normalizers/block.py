from .page import _iso


def normalize_block(block, admin=False):
    base = {
        "id": block.id,
        "type": block.type,
        "title": block.title,
        "order": block.order,
        "content": block.content or {},
        "media_url": block.media_url,
    }

    if admin:
        base["section_id"] = block.section_id
        base["is_visible"] = block.is_visible
        base["created_at"] = _iso(block.created_at)
        base["updated_at"] = _iso(block.updated_at)

    return base
