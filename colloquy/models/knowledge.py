"""ORM model for saved knowledge items (notes, saved chat answers)."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func

from colloquy.models.base import Base, new_id


class KnowledgeItem(Base):
    __tablename__ = "knowledge_items"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    category = Column(String(64), nullable=False, default="general", index=True)
    tags = Column(String(512), nullable=False, default="")
    source = Column(String(64), nullable=False, default="manual")
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
