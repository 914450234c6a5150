# marketing_cms/storage/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ContextManager, List, Optional, Tuple

from marketing_cms.models.page import Page
from marketing_cms.models.page_version import PageVersion
from marketing_cms.models.section import Section
from marketing_cms.models.block import Block


class PageStorage(ABC):
    """
    Persistence for pages, their versions and their content tree.

    Each call is atomic on its own; `transaction()` groups calls so that
    a page write and its version write commit or roll back together.
    """

    @abstractmethod
    def transaction(self) -> ContextManager[None]:
        ...

    # -------------------------------------------------
    # Pages
    # -------------------------------------------------
    @abstractmethod
    def find_page_by_id(self, page_id: str, *, for_update: bool = False) -> Optional[Page]:
        ...

    @abstractmethod
    def find_page_by_slug(self, slug: str) -> Optional[Page]:
        ...

    @abstractmethod
    def list_pages(
        self,
        *,
        page_type: Optional[str] = None,
        is_published: Optional[bool] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[Page], int]:
        ...

    @abstractmethod
    def insert_page(self, page: Page) -> Page:
        ...

    @abstractmethod
    def update_page_row(self, page: Page) -> Page:
        ...

    @abstractmethod
    def delete_page_row(self, page: Page) -> None:
        ...

    # -------------------------------------------------
    # Versions
    # -------------------------------------------------
    @abstractmethod
    def insert_page_version(self, version: PageVersion) -> PageVersion:
        ...

    @abstractmethod
    def query_versions_by_page(self, page_id: str, *, descending: bool = True) -> List[PageVersion]:
        ...

    @abstractmethod
    def find_latest_version(self, page_id: str) -> Optional[PageVersion]:
        ...

    @abstractmethod
    def find_version_by_id(self, version_id: str) -> Optional[PageVersion]:
        ...

    @abstractmethod
    def find_version_by_number(self, page_id: str, version_number: int) -> Optional[PageVersion]:
        ...

    # -------------------------------------------------
    # Content tree
    # -------------------------------------------------
    @abstractmethod
    def find_section_by_id(self, section_id: str) -> Optional[Section]:
        ...

    @abstractmethod
    def query_sections_by_page(self, page_id: str, *, visible_only: bool = False) -> List[Section]:
        ...

    @abstractmethod
    def insert_section(self, section: Section) -> Section:
        ...

    @abstractmethod
    def update_section_row(self, section: Section) -> Section:
        ...

    @abstractmethod
    def delete_section_row(self, section: Section) -> None:
        ...

    @abstractmethod
    def find_block_by_id(self, block_id: str) -> Optional[Block]:
        ...

    @abstractmethod
    def query_blocks_by_section(self, section_id: str, *, visible_only: bool = False) -> List[Block]:
        ...

    @abstractmethod
    def insert_block(self, block: Block) -> Block:
        ...

    @abstractmethod
    def update_block_row(self, block: Block) -> Block:
        ...

    @abstractmethod
    def delete_block_row(self, block: Block) -> None:
        ...

    @abstractmethod
    def renumber(self, items: List[Any]) -> List[Any]:
        """Persist orders 1..N in the sequence given."""
