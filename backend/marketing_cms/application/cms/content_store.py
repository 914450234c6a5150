# marketing_cms/application/cms/content_store.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from marketing_cms.domain.invariants.content import assert_block, assert_contiguous_order, assert_section
from marketing_cms.errors import NotFoundError, ValidationError
from marketing_cms.models.block import Block
from marketing_cms.models.page import Page
from marketing_cms.models.section import Section
from marketing_cms.storage.base import PageStorage
from marketing_cms.utils.audit import log_action
from marketing_cms.utils.order import apply_requested_order
from .page_store import AuditSink

logger = logging.getLogger(__name__)

# field -> accepted JSON types (None is always accepted for optional fields)
SECTION_FIELDS: Dict[str, tuple] = {
    "type": (str,),
    "title": (str,),
    "subtitle": (str,),
    "settings": (dict,),
    "is_visible": (bool,),
}

BLOCK_FIELDS: Dict[str, tuple] = {
    "type": (str,),
    "title": (str,),
    "content": (dict,),
    "media_url": (str,),
    "is_visible": (bool,),
}

REQUIRED = {"type", "is_visible"}


def _clean(data: Mapping[str, Any], fields: Dict[str, tuple], label: str) -> Dict[str, Any]:
    if "order" in data:
        raise ValidationError(
            f"{label} order is changed through the reorder endpoint",
            details={"field": "order"},
        )

    values = {key: value for key, value in data.items() if key in fields}
    for field, value in values.items():
        if value is None and field not in REQUIRED:
            continue
        if not isinstance(value, fields[field]):
            raise ValidationError(f"{field} has an invalid type", details={"field": field})
    return values


def _requested_positions(entries: Any, label: str) -> Dict[str, int]:
    """Validate a reorder payload: a list of {"id": ..., "order": n}."""
    if not isinstance(entries, list):
        raise ValidationError(f"{label} orders must be a list")

    positions: Dict[str, int] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValidationError(f"Each {label.lower()} order must be an object with id and order")
        item_id, order = entry.get("id"), entry.get("order")
        if not isinstance(item_id, str) or isinstance(order, bool) or not isinstance(order, int) or order < 1:
            raise ValidationError(
                f"Each {label.lower()} order needs a string id and a positive integer order",
                details={"entry": entry},
            )
        if item_id in positions:
            raise ValidationError(f"{label} {item_id} listed twice", details={"id": item_id})
        positions[item_id] = order
    return positions


class PageContentStore:
    """
    Sections and blocks attached to a page.

    Orders are contiguous (1..N) within a page for sections and within a
    section for blocks. Every structural change locks the owning page row,
    so concurrent inserts and reorders on one page are serialized.
    Content edits are not versioned; page versions cover page fields only.
    """

    def __init__(self, storage: PageStorage, *, audit: Optional[AuditSink] = log_action):
        self.storage = storage
        self.audit = audit

    # -------------------------------------------------
    # Sections
    # -------------------------------------------------
    def list_sections(self, page_id: str) -> List[Section]:
        self._page(page_id)
        return self.storage.query_sections_by_page(page_id)

    def get_section(self, section_id: str) -> Section:
        section = self.storage.find_section_by_id(section_id)
        if not section:
            raise NotFoundError("Section", section_id)
        return section

    def create_section(self, page_id: str, data: Mapping[str, Any], actor_id: Optional[str] = None) -> Section:
        """Append a section at the end of the page, or insert it at `position`."""
        values = _clean({k: v for k, v in data.items() if k != "position"}, SECTION_FIELDS, "Section")
        if not values.get("type"):
            raise ValidationError("Section type is required", details={"field": "type"})
        position = self._position(data)

        with self.storage.transaction():
            page = self._page(page_id, for_update=True)
            existing = self.storage.query_sections_by_page(page.id)

            section = Section()
            section.page_id = page.id
            section.order = len(existing) + 1
            section.settings = {}
            self._apply(section, values)
            assert_section(section)
            self.storage.insert_section(section)

            if position is not None and position < section.order:
                existing.insert(position - 1, section)
                self.storage.renumber(existing)

            self._record(actor_id, "create", section.id, {
                "section_type": section.type,
                "page_id": page.id,
                "order": section.order,
            })

        logger.info("Added %s section %s to page %s", section.type, section.id, page_id)
        return section

    def update_section(self, section_id: str, data: Mapping[str, Any], actor_id: Optional[str] = None) -> Section:
        values = self._updatable(data, SECTION_FIELDS, "Section")

        with self.storage.transaction():
            section = self.get_section(section_id)
            self._page(section.page_id, for_update=True)

            self._apply(section, values)
            assert_section(section)
            self.storage.update_section_row(section)

            self._record(actor_id, "update", section.id, {
                "section_type": section.type,
                "fields": sorted(values),
            })

        return section

    def delete_section(self, section_id: str, actor_id: Optional[str] = None) -> Dict[str, Any]:
        """Delete a section with its blocks and close the gap in the page's order."""
        with self.storage.transaction():
            section = self.get_section(section_id)
            page_id = section.page_id
            section_type = section.type
            self._page(page_id, for_update=True)

            self.storage.delete_section_row(section)
            self.storage.renumber(self.storage.query_sections_by_page(page_id))

            self._record(actor_id, "delete", section_id, {
                "section_type": section_type,
                "page_id": page_id,
            })

        logger.info("Deleted section %s from page %s", section_id, page_id)
        return {"success": True, "message": "Section deleted successfully"}

    def reorder_sections(self, page_id: str, section_orders: Any, actor_id: Optional[str] = None) -> List[Section]:
        requested = _requested_positions(section_orders, "Section")

        with self.storage.transaction():
            self._page(page_id, for_update=True)
            sections = self.storage.query_sections_by_page(page_id)
            self._check_members(requested, sections, "Section")

            ordered = self.storage.renumber(apply_requested_order(sections, requested))
            assert_contiguous_order(ordered, "Section")

            self._record(actor_id, "reorder", page_id, {
                "action": "reorder_sections",
                "count": len(requested),
            })

        return ordered

    # -------------------------------------------------
    # Blocks
    # -------------------------------------------------
    def list_blocks(self, section_id: str) -> List[Block]:
        self.get_section(section_id)
        return self.storage.query_blocks_by_section(section_id)

    def get_block(self, block_id: str) -> Block:
        block = self.storage.find_block_by_id(block_id)
        if not block:
            raise NotFoundError("Block", block_id)
        return block

    def create_block(self, section_id: str, data: Mapping[str, Any], actor_id: Optional[str] = None) -> Block:
        values = _clean({k: v for k, v in data.items() if k != "position"}, BLOCK_FIELDS, "Block")
        if not values.get("type"):
            raise ValidationError("Block type is required", details={"field": "type"})
        position = self._position(data)

        with self.storage.transaction():
            section = self.get_section(section_id)
            self._page(section.page_id, for_update=True)
            existing = self.storage.query_blocks_by_section(section.id)

            block = Block()
            block.section_id = section.id
            block.order = len(existing) + 1
            block.content = {}
            self._apply(block, values)
            assert_block(block)
            self.storage.insert_block(block)

            if position is not None and position < block.order:
                existing.insert(position - 1, block)
                self.storage.renumber(existing)

            self._record(actor_id, "create", block.id, {
                "block_type": block.type,
                "section_id": section.id,
                "order": block.order,
            })

        return block

    def update_block(self, block_id: str, data: Mapping[str, Any], actor_id: Optional[str] = None) -> Block:
        values = self._updatable(data, BLOCK_FIELDS, "Block")

        with self.storage.transaction():
            block = self.get_block(block_id)
            self._page(block.section.page_id, for_update=True)

            self._apply(block, values)
            assert_block(block)
            self.storage.update_block_row(block)

            self._record(actor_id, "update", block.id, {
                "block_type": block.type,
                "fields": sorted(values),
            })

        return block

    def delete_block(self, block_id: str, actor_id: Optional[str] = None) -> Dict[str, Any]:
        with self.storage.transaction():
            block = self.get_block(block_id)
            section_id = block.section_id
            block_type = block.type
            self._page(block.section.page_id, for_update=True)

            self.storage.delete_block_row(block)
            self.storage.renumber(self.storage.query_blocks_by_section(section_id))

            self._record(actor_id, "delete", block_id, {
                "block_type": block_type,
                "section_id": section_id,
            })

        return {"success": True, "message": "Block deleted successfully"}

    def reorder_blocks(self, section_id: str, block_orders: Any, actor_id: Optional[str] = None) -> List[Block]:
        requested = _requested_positions(block_orders, "Block")

        with self.storage.transaction():
            section = self.get_section(section_id)
            self._page(section.page_id, for_update=True)
            blocks = self.storage.query_blocks_by_section(section.id)
            self._check_members(requested, blocks, "Block")

            ordered = self.storage.renumber(apply_requested_order(blocks, requested))
            assert_contiguous_order(ordered, "Block")

            self._record(actor_id, "reorder", section_id, {
                "action": "reorder_blocks",
                "count": len(requested),
            })

        return ordered

    # -------------------------------------------------
    # Public tree
    # -------------------------------------------------
    def get_published_tree(self, page: Page) -> List[Dict[str, Any]]:
        """Visible sections of a published page, each with its visible blocks."""
        if not page.is_published:
            raise NotFoundError("Page", page.slug)

        return [
            {
                "section": section,
                "blocks": self.storage.query_blocks_by_section(section.id, visible_only=True),
            }
            for section in self.storage.query_sections_by_page(page.id, visible_only=True)
        ]

    # -------------------------------------------------
    # Internals
    # -------------------------------------------------
    def _page(self, page_id: str, *, for_update: bool = False) -> Page:
        page = self.storage.find_page_by_id(page_id, for_update=for_update)
        if not page:
            raise NotFoundError("Page", page_id)
        return page

    @staticmethod
    def _position(data: Mapping[str, Any]) -> Optional[int]:
        position = data.get("position")
        if position is None:
            return None
        if isinstance(position, bool) or not isinstance(position, int) or position < 1:
            raise ValidationError("position must be a positive integer", details={"field": "position"})
        return position

    @staticmethod
    def _updatable(data: Mapping[str, Any], fields: Dict[str, tuple], label: str) -> Dict[str, Any]:
        values = _clean(data, fields, label)
        if not values:
            raise ValidationError("No valid fields provided for update")
        if "type" in values and not values["type"]:
            raise ValidationError(f"{label} type must not be empty", details={"field": "type"})
        return values

    @staticmethod
    def _check_members(requested: Mapping[str, int], items, label: str) -> None:
        known = {item.id for item in items}
        unknown = sorted(set(requested) - known)
        if unknown:
            raise ValidationError(f"Unknown {label.lower()} ids: {unknown}", details={"ids": unknown})

    @staticmethod
    def _apply(entity, values: Mapping[str, Any]) -> None:
        for field, value in values.items():
            setattr(entity, field, value)

    def _record(self, actor_id, action, resource_id, details) -> None:
        if self.audit is None:
            return
        self.audit(
            user_id=actor_id,
            action=action,
            resource="content",
            resource_id=resource_id,
            details=details,
        )
