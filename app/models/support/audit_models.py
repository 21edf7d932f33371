from sqlalchemy import Column, Integer, String, Text, ForeignKey, Index, DateTime, JSON
from sqlalchemy.sql import func
from app.core.db import Base


class AuditLog(Base):
    """Immutable audit log. APPEND-ONLY. Never updated, never deleted."""

    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    action = Column(Text, nullable=False)
    table_name = Column(Text, nullable=False)
    record_id = Column(Integer, nullable=True)
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_audit_log_user_created", "user_id", "created_at"),
        Index("ix_audit_log_table_record", "table_name", "record_id"),
    )

    def __repr__(self):
        return f"<AuditLog id={self.id} action={self.action} table={self.table_name}:{self.record_id}>"
