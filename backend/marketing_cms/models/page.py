from marketing_cms.extensions import db
from .base import BaseModel, utcnow

PAGE_TYPES = {"marketing", "blog", "job"}


class Page(BaseModel):
    __tablename__ = "pages"

    slug = db.Column(db.String(200), nullable=False, unique=True, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    page_type = db.Column(db.String(50), nullable=False, default="marketing", index=True)
    category = db.Column(db.String(100), nullable=True)

    meta_title = db.Column(db.String(200), nullable=True)
    meta_description = db.Column(db.Text, nullable=True)
    featured_image = db.Column(db.String(512), nullable=True)
    # "metadata" is reserved on declarative classes
    meta = db.Column("metadata", db.JSON, nullable=True)

    is_published = db.Column(db.Boolean, nullable=False, default=False, index=True)
    published_at = db.Column(db.DateTime(timezone=True), nullable=True)

    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    created_by = db.Column(db.String(36), nullable=True)
    updated_by = db.Column(db.String(36), nullable=True)

    # Versions go with the page (cascade delete)
    versions = db.relationship(
        "PageVersion",
        back_populates="page",
        order_by="PageVersion.version_number.desc()",
        cascade="all",
    )

    # Content tree: sections in display order, each owning its blocks
    sections = db.relationship(
        "Section",
        back_populates="page",
        order_by="Section.order",
        cascade="all",
    )
