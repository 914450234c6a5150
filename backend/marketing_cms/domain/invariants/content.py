from marketing_cms.models.block import BLOCK_TYPES, MEDIA_BLOCK_TYPES
from marketing_cms.models.section import SECTION_TYPES
from .exceptions import InvariantViolation


def assert_contiguous_order(items, label="Item"):
    orders = [item.order for item in items]
    if not orders:
        return

    expected = list(range(1, len(orders) + 1))
    if sorted(orders) != expected:
        raise InvariantViolation(
            f"{label} orders are not consecutive starting from 1: {orders}"
        )


def assert_section(section):
    if section.type not in SECTION_TYPES:
        raise InvariantViolation(
            f"Unknown section type '{section.type}', expected one of {sorted(SECTION_TYPES)}"
        )


def assert_block(block):
    if block.type not in BLOCK_TYPES:
        raise InvariantViolation(
            f"Unknown block type '{block.type}', expected one of {sorted(BLOCK_TYPES)}"
        )

    if block.type in MEDIA_BLOCK_TYPES:
        if not block.media_url:
            raise InvariantViolation(
                f"{block.type} block must have media_url set."
            )
    else:
        if block.media_url:
            raise InvariantViolation(
                f"{block.type} block should not have media_url set."
            )
