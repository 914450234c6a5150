from .page import Page, PAGE_TYPES
from .page_version import PageVersion, CHANGE_TYPES
from .section import Section, SECTION_TYPES
from .block import Block, BLOCK_TYPES
from .audit_log import AuditLog

__all__ = [
    "Page",
    "PAGE_TYPES",
    "PageVersion",
    "CHANGE_TYPES",
    "Section",
    "SECTION_TYPES",
    "Block",
    "BLOCK_TYPES",
    "AuditLog",
]
