import logging
from contextlib import contextmanager

from marketing_cms.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def transactional():
    """Commit the session on success; roll everything back on any error."""
    try:
        yield
        db.session.commit()
    except Exception as exc:
        db.session.rollback()
        logger.debug("Transaction rolled back (%s)", type(exc).__name__)
        raise
