from sqlalchemy import Column, DateTime
from sqlalchemy.sql import func
from sqlalchemy.ext.hybrid import hybrid_property


class TimestampMixin:
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now()
    )


class SoftDeleteMixin:
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    @hybrid_property
    def is_deleted(self):
        return self.deleted_at is not None

    @is_deleted.expression
    def is_deleted(cls):
        return cls.deleted_at.is_not(None)
