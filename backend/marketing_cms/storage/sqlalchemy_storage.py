# marketing_cms/storage/sqlalchemy_storage.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from marketing_cms.errors import ConcurrentModificationError, ConflictError
from marketing_cms.extensions import db
from marketing_cms.models.page import Page
from marketing_cms.models.page_version import PageVersion
from marketing_cms.models.section import Section
from marketing_cms.models.block import Block
from marketing_cms.models.base import utcnow
from marketing_cms.utils.order import compact_order
from marketing_cms.utils.transaction import transactional
from .base import PageStorage

logger = logging.getLogger(__name__)


class SQLAlchemyPageStorage(PageStorage):
    """PageStorage over the Flask-SQLAlchemy session."""

    def transaction(self):
        return transactional()

    def find_page_by_id(self, page_id, *, for_update=False):
        stmt = select(Page).where(Page.id == page_id)
        if for_update:
            # Serializes concurrent writers of the same page
            stmt = stmt.with_for_update()
        return db.session.execute(stmt).scalar_one_or_none()

    def find_page_by_slug(self, slug):
        return db.session.execute(
            select(Page).where(Page.slug == slug)
        ).scalar_one_or_none()

    def list_pages(self, *, page_type=None, is_published=None, page=1, per_page=20) -> Tuple[List[Page], int]:
        query = Page.query
        if page_type:
            query = query.filter_by(page_type=page_type)
        if is_published is not None:
            query = query.filter_by(is_published=is_published)

        pagination = query.order_by(Page.created_at.desc(), Page.id.desc()).paginate(
            page=page, per_page=per_page, error_out=False
        )
        return list(pagination.items), pagination.total or 0

    def insert_page(self, page):
        db.session.add(page)
        try:
            db.session.flush()  # ensures page.id exists
        except IntegrityError as exc:
            # unique slug lost a race with a concurrent create
            raise ConflictError("Page with this slug already exists") from exc
        return page

    def update_page_row(self, page):
        page.updated_at = utcnow()
        try:
            db.session.flush()
        except IntegrityError as exc:
            raise ConflictError("Page with this slug already exists") from exc
        return page

    def delete_page_row(self, page):
        # Reload the collections so the cascade sees every child row
        db.session.expire(page, ["versions", "sections"])
        db.session.delete(page)
        db.session.flush()

    def insert_page_version(self, version):
        db.session.add(version)
        try:
            db.session.flush()
        except IntegrityError as exc:
            logger.warning(
                "Version %s of page %s already exists",
                version.version_number,
                version.page_id,
            )
            raise ConcurrentModificationError(
                "Page was modified concurrently",
                details={
                    "page_id": version.page_id,
                    "version_number": version.version_number,
                },
            ) from exc
        return version

    def query_versions_by_page(self, page_id, *, descending=True) -> List[PageVersion]:
        order = PageVersion.version_number.desc() if descending else PageVersion.version_number.asc()
        return list(
            db.session.execute(
                select(PageVersion).where(PageVersion.page_id == page_id).order_by(order)
            ).scalars()
        )

    def find_latest_version(self, page_id) -> Optional[PageVersion]:
        return db.session.execute(
            select(PageVersion)
            .where(PageVersion.page_id == page_id)
            .order_by(PageVersion.version_number.desc())
            .limit(1)
        ).scalar_one_or_none()

    def find_version_by_id(self, version_id) -> Optional[PageVersion]:
        return db.session.get(PageVersion, version_id)

    def find_version_by_number(self, page_id, version_number) -> Optional[PageVersion]:
        return db.session.execute(
            select(PageVersion).where(
                PageVersion.page_id == page_id,
                PageVersion.version_number == version_number,
            )
        ).scalar_one_or_none()

    # -------------------------------------------------
    # Content tree
    # -------------------------------------------------
    def find_section_by_id(self, section_id) -> Optional[Section]:
        return db.session.get(Section, section_id)

    def query_sections_by_page(self, page_id, *, visible_only=False) -> List[Section]:
        stmt = select(Section).where(Section.page_id == page_id)
        if visible_only:
            stmt = stmt.where(Section.is_visible.is_(True))
        return list(db.session.execute(stmt.order_by(Section.order.asc())).scalars())

    def insert_section(self, section):
        return self._insert_ordered(section, parent_id=section.page_id)

    def update_section_row(self, section):
        section.updated_at = utcnow()
        db.session.flush()
        return section

    def delete_section_row(self, section):
        db.session.expire(section, ["blocks"])
        db.session.delete(section)
        db.session.flush()

    def find_block_by_id(self, block_id) -> Optional[Block]:
        return db.session.get(Block, block_id)

    def query_blocks_by_section(self, section_id, *, visible_only=False) -> List[Block]:
        stmt = select(Block).where(Block.section_id == section_id)
        if visible_only:
            stmt = stmt.where(Block.is_visible.is_(True))
        return list(db.session.execute(stmt.order_by(Block.order.asc())).scalars())

    def insert_block(self, block):
        return self._insert_ordered(block, parent_id=block.section_id)

    def update_block_row(self, block):
        block.updated_at = utcnow()
        db.session.flush()
        return block

    def delete_block_row(self, block):
        db.session.delete(block)
        db.session.flush()

    def renumber(self, items):
        return compact_order(items)

    def _insert_ordered(self, item, *, parent_id):
        db.session.add(item)
        try:
            db.session.flush()
        except IntegrityError as exc:
            # (parent, order) is unique; another writer took the slot
            logger.warning(
                "%s order %s under %s already taken",
                type(item).__name__,
                item.order,
                parent_id,
            )
            raise ConcurrentModificationError(
                "Content was reordered concurrently",
                details={"parent_id": parent_id, "order": item.order},
            ) from exc
        return item
