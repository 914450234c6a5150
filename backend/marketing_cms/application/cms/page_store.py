# marketing_cms/application/cms/page_store.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from marketing_cms.domain.invariants.page import assert_page
from marketing_cms.domain.lifecycle.page import change_summary, classify_change
from marketing_cms.errors import ConcurrentModificationError, ConflictError, NotFoundError, ValidationError
from marketing_cms.models.base import utcnow
from marketing_cms.models.page import Page, PAGE_TYPES
from marketing_cms.models.page_version import PageVersion
from marketing_cms.storage.base import PageStorage
from marketing_cms.utils.audit import log_action
from marketing_cms.utils.versioning import SNAPSHOT_FIELDS, diff_versions, next_version, restorable_fields, snapshot_page

logger = logging.getLogger(__name__)

CREATE_FIELDS = {
    "slug",
    "title",
    "description",
    "page_type",
    "category",
    "meta_title",
    "meta_description",
    "featured_image",
    "metadata",
    "is_published",
}

UPDATABLE_FIELDS = CREATE_FIELDS - {"page_type"}

TEXT_FIELDS = (
    "slug",
    "title",
    "description",
    "page_type",
    "category",
    "meta_title",
    "meta_description",
    "featured_image",
)

AuditSink = Callable[..., Any]


def check_field_types(data: Mapping[str, Any]) -> None:
    """Reject values whose JSON type does not match the page column."""
    for field in TEXT_FIELDS:
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{field} must be a string", details={"field": field})

    meta = data.get("metadata")
    if meta is not None and not isinstance(meta, dict):
        raise ValidationError("metadata must be an object", details={"field": "metadata"})

    if "is_published" in data and not isinstance(data["is_published"], bool):
        raise ValidationError("is_published must be a boolean", details={"field": "is_published"})


class VersionedPageStore:
    """
    Pages and their append-only version history.

    Every mutation writes a PageVersion in the same transaction as the page
    row: version 1 on create, then one version per update, publish,
    unpublish or restore, numbered contiguously per page.
    """

    def __init__(
        self,
        storage: PageStorage,
        *,
        audit: Optional[AuditSink] = log_action,
        attribution_enabled: bool = True,
    ):
        self.storage = storage
        self.audit = audit
        self.attribution_enabled = attribution_enabled

    # -------------------------------------------------
    # Pages
    # -------------------------------------------------
    def create_page(self, data: Mapping[str, Any], actor_id: Optional[str] = None) -> Page:
        """
        Create a page and its version 1.

        Edge cases handled:
        - Missing slug or title
        - Wrongly typed fields (e.g. "false" for is_published)
        - Duplicate slug (checked up front and enforced by the unique index)
        - Version write failure rolls the page back with it
        """
        check_field_types(data)

        slug = (data.get("slug") or "").strip()
        title = data.get("title")

        if not slug or not title:
            raise ValidationError("Both title and slug are required")

        page_type = data.get("page_type") or "marketing"
        if page_type not in PAGE_TYPES:
            raise ValidationError(f"Invalid page type '{page_type}'")

        attribution = self._attribution(actor_id)

        with self.storage.transaction():
            if self.storage.find_page_by_slug(slug):
                raise ConflictError("Page with this slug already exists", details={"slug": slug})

            page = Page()
            page.slug = slug
            page.page_type = page_type
            self._apply_fields(page, {
                key: value for key, value in data.items()
                if key in CREATE_FIELDS - {"slug", "page_type"}
            })
            page.is_published = data.get("is_published", False)
            page.published_at = utcnow() if page.is_published else None
            page.created_by = attribution
            page.updated_by = attribution

            assert_page(page)
            self.storage.insert_page(page)

            version = self._write_version(
                page,
                version_number=1,
                change_type="create",
                snapshot=snapshot_page(page),
                actor_id=actor_id,
            )

            self._record(actor_id, "create", page, {
                "page_title": page.title,
                "slug": page.slug,
                "version_number": version.version_number,
            })

        logger.info("Created page %s (%s)", page.id, page.slug)
        return page

    def update_page(self, page_id: str, data: Mapping[str, Any], actor_id: Optional[str] = None) -> Page:
        """
        Apply a partial update, writing the next version first.

        Keys missing from `data` keep their current value. A lost race on
        the version number is retried once before surfacing.
        """
        changes = self._updatable(data)
        return self._update_with_retry(page_id, changes, actor_id)

    def publish_page(self, page_id: str, is_published: bool = True, actor_id: Optional[str] = None) -> Page:
        return self.update_page(page_id, {"is_published": is_published}, actor_id)

    def delete_page(self, page_id: str, actor_id: Optional[str] = None) -> Dict[str, Any]:
        with self.storage.transaction():
            page = self.storage.find_page_by_id(page_id, for_update=True)
            if not page:
                raise NotFoundError("Page", page_id)

            title = page.title
            self.storage.delete_page_row(page)

            self._record(actor_id, "delete", None, {"page_title": title}, resource_id=page_id)

        logger.info("Deleted page %s with its versions", page_id)
        return {"success": True, "message": "Page deleted successfully"}

    def get_page(self, page_id: str) -> Page:
        page = self.storage.find_page_by_id(page_id)
        if not page:
            raise NotFoundError("Page", page_id)
        return page

    def get_page_by_slug(self, slug: str, *, published_only: bool = False) -> Page:
        page = self.storage.find_page_by_slug(slug)
        if not page or (published_only and not page.is_published):
            raise NotFoundError("Page", slug)
        return page

    def list_pages(
        self,
        *,
        page_type: Optional[str] = None,
        is_published: Optional[bool] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[Page], int]:
        return self.storage.list_pages(
            page_type=page_type,
            is_published=is_published,
            page=page,
            per_page=per_page,
        )

    # -------------------------------------------------
    # Versions
    # -------------------------------------------------
    def get_page_versions(self, page_id: str) -> List[PageVersion]:
        return self.storage.query_versions_by_page(page_id, descending=True)

    def get_latest_version(self, page_id: str) -> Optional[PageVersion]:
        return self.storage.find_latest_version(page_id)

    def get_page_version_by_id(self, version_id: str) -> Optional[PageVersion]:
        return self.storage.find_version_by_id(version_id)

    def get_page_version(self, page_id: str, version_id: str) -> PageVersion:
        version = self.storage.find_version_by_id(version_id)
        if not version or version.page_id != page_id:
            raise NotFoundError("PageVersion", version_id)
        return version

    def restore_version(self, page_id: str, version_id: str, acting_user_id: Optional[str] = None) -> Page:
        """
        Make the page's content equal to a historical version.

        The restore is itself recorded as a new version; history is never
        rewritten. A version owned by another page is reported as missing.
        """
        version = self.get_page_version(page_id, version_id)
        return self._restore(page_id, version, acting_user_id)

    def restore_version_number(self, page_id: str, version_number: int, acting_user_id: Optional[str] = None) -> Page:
        version = self.storage.find_version_by_number(page_id, version_number)
        if not version:
            raise NotFoundError("PageVersion", f"{page_id}:{version_number}")
        return self._restore(page_id, version, acting_user_id)

    def compare_versions(self, version_id1: str, version_id2: str) -> Dict[str, Any]:
        version1 = self.storage.find_version_by_id(version_id1)
        if not version1:
            raise NotFoundError("PageVersion", version_id1)

        version2 = self.storage.find_version_by_id(version_id2)
        if not version2:
            raise NotFoundError("PageVersion", version_id2)

        return {
            "version1": version1,
            "version2": version2,
            "changes": diff_versions(version1, version2),
        }

    # -------------------------------------------------
    # Internals
    # -------------------------------------------------
    def _restore(self, page_id: str, version: PageVersion, acting_user_id: Optional[str]) -> Page:
        return self._update_with_retry(
            page_id,
            restorable_fields(version),
            acting_user_id,
            audit_action="restore",
            audit_details={
                "version_id": version.id,
                "version_number": version.version_number,
            },
        )

    def _update_with_retry(self, page_id, changes, actor_id, **audit) -> Page:
        try:
            return self._apply_update(page_id, changes, actor_id, **audit)
        except ConcurrentModificationError:
            logger.warning("Version race on page %s, retrying once", page_id)
            return self._apply_update(page_id, changes, actor_id, **audit)

    def _apply_update(
        self,
        page_id: str,
        changes: Dict[str, Any],
        actor_id: Optional[str],
        *,
        audit_action: Optional[str] = None,
        audit_details: Optional[Dict[str, Any]] = None,
    ) -> Page:
        with self.storage.transaction():
            page = self.storage.find_page_by_id(page_id, for_update=True)
            if not page:
                raise NotFoundError("Page", page_id)

            changes = dict(changes)
            page_type = changes.pop("page_type", page.page_type)
            if page_type != page.page_type:
                raise ValidationError(
                    "page_type is fixed at creation",
                    details={"field": "page_type", "page_type": page.page_type},
                )
            if not changes:
                raise ValidationError("No valid fields provided for update")

            if "slug" in changes and changes["slug"] != page.slug:
                existing = self.storage.find_page_by_slug(changes["slug"])
                if existing and existing.id != page.id:
                    raise ConflictError("Page with this slug already exists", details={"slug": changes["slug"]})

            change_type = classify_change(current_is_published=page.is_published, changes=changes)

            latest = self.storage.find_latest_version(page.id)
            version = self._write_version(
                page,
                version_number=next_version(latest),
                change_type=change_type,
                snapshot=snapshot_page(page, changes),
                actor_id=actor_id,
            )

            was_published = page.is_published
            self._apply_fields(page, changes)
            if page.is_published and not was_published:
                page.published_at = utcnow()
            elif not page.is_published:
                page.published_at = None

            if self.attribution_enabled:
                page.updated_by = actor_id

            assert_page(page)
            self.storage.update_page_row(page)

            details = {
                "page_title": page.title,
                "version_number": version.version_number,
                "fields": sorted(changes),
            }
            details.update(audit_details or {})
            self._record(actor_id, audit_action or change_type, page, details)

        logger.info(
            "Page %s now at version %s (%s)",
            page.id,
            version.version_number,
            change_type,
        )
        return page

    def _write_version(self, page, *, version_number, change_type, snapshot, actor_id) -> PageVersion:
        version = PageVersion(**snapshot)
        version.page_id = page.id
        version.version_number = version_number
        version.change_type = change_type
        version.change_summary = change_summary(change_type)
        version.created_by = self._attribution(actor_id)
        return self.storage.insert_page_version(version)

    def _updatable(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        # page_type is kept so _apply_update can reject an attempt to change it
        changes = {key: value for key, value in data.items() if key in CREATE_FIELDS}

        if not changes:
            raise ValidationError("No valid fields provided for update")

        check_field_types(changes)

        if "title" in changes and not changes["title"]:
            raise ValidationError("Title must not be empty")

        if "slug" in changes:
            slug = (changes["slug"] or "").strip()
            if not slug:
                raise ValidationError("Slug must not be empty")
            changes["slug"] = slug

        return changes

    @staticmethod
    def _apply_fields(page: Page, values: Mapping[str, Any]) -> None:
        for field, value in values.items():
            setattr(page, SNAPSHOT_FIELDS.get(field, field), value)

    def _attribution(self, actor_id: Optional[str]) -> Optional[str]:
        return actor_id if self.attribution_enabled else None

    def _record(self, actor_id, action, page, details, *, resource_id=None) -> None:
        if self.audit is None:
            return
        self.audit(
            user_id=actor_id,
            action=action,
            resource="pages",
            resource_id=page.id if page is not None else resource_id,
            details=details,
        )
