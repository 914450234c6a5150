from marketing_cms.models.page import PAGE_TYPES
from .exceptions import InvariantViolation

def assert_page(page):
    if not page.slug or not page.slug.strip():
        raise InvariantViolation("Page slug must not be empty.")

    if not page.title or not page.title.strip():
        raise InvariantViolation("Page title must not be empty.")

    if page.page_type not in PAGE_TYPES:
        raise InvariantViolation(
            f"Unknown page type '{page.page_type}', expected one of {sorted(PAGE_TYPES)}"
        )

    # published_at is set exactly while the page is published
    if bool(page.is_published) != (page.published_at is not None):
        raise InvariantViolation(
            f"published_at must be set if and only if the page is published "
            f"(is_published={page.is_published}, published_at={page.published_at})"
        )
