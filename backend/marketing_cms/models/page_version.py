from sqlalchemy import event
from marketing_cms.extensions import db
from .base import BaseModel

CHANGE_TYPES = ("create", "update", "publish", "unpublish")


class PageVersion(BaseModel):
    __tablename__ = "page_versions"

    page_id = db.Column(
        db.String(36),
        db.ForeignKey("pages.id", ondelete="CASCADE"),
        nullable=False
    )

    version_number = db.Column(db.Integer, nullable=False)

    # Snapshot of the page's content-bearing fields
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    page_type = db.Column(db.String(50), nullable=False)
    category = db.Column(db.String(100), nullable=True)
    meta_title = db.Column(db.String(200), nullable=True)
    meta_description = db.Column(db.Text, nullable=True)
    featured_image = db.Column(db.String(512), nullable=True)
    meta = db.Column("metadata", db.JSON, nullable=True)
    is_published = db.Column(db.Boolean, nullable=False, default=False)

    change_type = db.Column(db.String(20), nullable=False)
    # create | update | publish | unpublish
    change_summary = db.Column(db.String(255), nullable=True)

    created_by = db.Column(db.String(36), nullable=True)

    page = db.relationship("Page", back_populates="versions")

    __table_args__ = (
        db.UniqueConstraint("page_id", "version_number", name="uq_page_version"),
        db.CheckConstraint("version_number > 0", name="ck_page_version_positive"),
        db.Index("idx_page_version_page", "page_id"),
    )


@event.listens_for(PageVersion, "before_update")
def prevent_version_mutation(mapper, connection, target):
    raise RuntimeError("Page versions are immutable")
