from marketing_cms.extensions import db
from .base import BaseModel, utcnow

BLOCK_TYPES = {"text", "image", "video", "button", "html"}
MEDIA_BLOCK_TYPES = {"image", "video"}


class Block(BaseModel):
    __tablename__ = "blocks"

    section_id = db.Column(
        db.String(36),
        db.ForeignKey("sections.id", ondelete="CASCADE"),
        nullable=False
    )
    type = db.Column(db.String(100), nullable=False)  # text, image, video, button
    title = db.Column(db.String(200), nullable=True)
    order = db.Column(db.Integer, nullable=False)
    content = db.Column(db.JSON, default=dict)  # JSON for text/button data
    media_url = db.Column(db.String(512), nullable=True)  # images and videos only
    is_visible = db.Column(db.Boolean, nullable=False, default=True)

    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationship to parent Section
    section = db.relationship("Section", back_populates="blocks")

    __table_args__ = (
        db.UniqueConstraint("section_id", "order", name="uq_section_block_order"),
        db.Index("idx_block_section_order", "section_id", "order"),
    )
