from marketing_cms.extensions import db
from .base import BaseModel, utcnow

SECTION_TYPES = {"hero", "features", "gallery", "content", "cta", "testimonials"}


class Section(BaseModel):
    __tablename__ = "sections"

    page_id = db.Column(
        db.String(36),
        db.ForeignKey("pages.id", ondelete="CASCADE"),
        nullable=False
    )
    type = db.Column(db.String(100), nullable=False)  # hero, features, gallery
    title = db.Column(db.String(200), nullable=True)
    subtitle = db.Column(db.String(255), nullable=True)
    order = db.Column(db.Integer, nullable=False)
    settings = db.Column(db.JSON, default=dict)
    is_visible = db.Column(db.Boolean, nullable=False, default=True)

    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    page = db.relationship("Page", back_populates="sections")
    blocks = db.relationship(
        "Block",
        back_populates="section",
        order_by="Block.order",
        cascade="all",
    )

    __table_args__ = (
        db.UniqueConstraint("page_id", "order", name="uq_page_section_order"),
        db.Index("idx_section_page_order", "page_id", "order"),
    )
