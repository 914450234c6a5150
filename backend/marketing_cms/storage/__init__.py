from .base import PageStorage
from .sqlalchemy_storage import SQLAlchemyPageStorage

__all__ = ["PageStorage", "SQLAlchemyPageStorage"]
