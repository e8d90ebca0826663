"""
Community models - badges, notifications and moderation reports.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.db.postgres import Base
from app.models.enums import (
    BadgeType,
    NotificationType,
    ReportableEntityType,
    ReportReasonType,
    ReportStatus,
)


class Badge(Base):
    __tablename__ = "badges"
    __table_args__ = (UniqueConstraint("user_id", "badge_type", name="uq_badge_user_type"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    badge_type = Column(Enum(BadgeType, native_enum=False, length=40), nullable=False)
    earned_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    notification_type = Column(Enum(NotificationType, native_enum=False, length=40), nullable=False)
    message = Column(Text, nullable=False)
    link_id = Column(Integer, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    user = relationship("User")


class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (
        UniqueConstraint("created_by", "entity_type", "entity_id", name="uq_report_user_entity"),
    )

    id = Column(Integer, primary_key=True)
    entity_type = Column(Enum(ReportableEntityType, native_enum=False, length=30), nullable=False)
    entity_id = Column(Integer, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reason_type = Column(Enum(ReportReasonType, native_enum=False, length=20), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        Enum(ReportStatus, native_enum=False, length=20),
        nullable=False, default=ReportStatus.PENDING, index=True,
    )
    admin_note = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    resolved_at = Column(DateTime, nullable=True)

    reporter = relationship("User")
