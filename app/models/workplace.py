"""
Workplace models - workplaces, employer links/requests, reviews and replies.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.db.postgres import Base
from app.models.enums import EmployerRequestStatus, EmployerRole, EthicalPolicy


class Workplace(Base):
    __tablename__ = "workplaces"

    id = Column(Integer, primary_key=True)
    company_name = Column(String(200), nullable=False, index=True)
    sector = Column(String(100), nullable=False)
    location = Column(String(200), nullable=False)
    short_description = Column(String(500), nullable=True)
    detailed_description = Column(Text, nullable=True)
    website = Column(String(500), nullable=True)
    image_url = Column(String(500), nullable=True)
    ethical_tags = Column(JSON, nullable=False, default=list)  # EthicalPolicy names
    review_count = Column(Integer, nullable=False, default=0)
    deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    employers = relationship(
        "EmployerWorkplace", back_populates="workplace",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def policies(self) -> list:
        return [EthicalPolicy(tag) for tag in (self.ethical_tags or [])]


class EmployerWorkplace(Base):
    __tablename__ = "employer_workplaces"
    __table_args__ = (UniqueConstraint("user_id", "workplace_id", name="uq_employer_workplace"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    workplace_id = Column(Integer, ForeignKey("workplaces.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(EmployerRole, native_enum=False, length=10), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User")
    workplace = relationship("Workplace", back_populates="employers")


class EmployerRequest(Base):
    __tablename__ = "employer_requests"

    id = Column(Integer, primary_key=True)
    workplace_id = Column(Integer, ForeignKey("workplaces.id", ondelete="CASCADE"), nullable=False, index=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    note = Column(Text, nullable=True)
    status = Column(
        Enum(EmployerRequestStatus, native_enum=False, length=10),
        nullable=False, default=EmployerRequestStatus.PENDING,
    )
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    resolved_at = Column(DateTime, nullable=True)

    workplace = relationship("Workplace")
    requester = relationship("User")


class WorkplaceReview(Base):
    __tablename__ = "workplace_reviews"
    __table_args__ = (UniqueConstraint("workplace_id", "user_id", name="uq_review_workplace_user"),)

    id = Column(Integer, primary_key=True)
    workplace_id = Column(Integer, ForeignKey("workplaces.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=True)
    anonymous = Column(Boolean, nullable=False, default=False)
    overall_rating = Column(Float, nullable=False)
    helpful_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    workplace = relationship("Workplace")
    user = relationship("User")
    policy_ratings = relationship(
        "ReviewPolicyRating", order_by="ReviewPolicyRating.id",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    reply = relationship(
        "ReviewReply", back_populates="review", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )
    helpful_marks = relationship("ReviewHelpful", cascade="all, delete-orphan", passive_deletes=True)


class ReviewPolicyRating(Base):
    __tablename__ = "review_policy_ratings"
    __table_args__ = (UniqueConstraint("review_id", "policy", name="uq_review_policy"),)

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("workplace_reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    policy = Column(Enum(EthicalPolicy, native_enum=False, length=40), nullable=False)
    score = Column(Integer, nullable=False)


class ReviewHelpful(Base):
    __tablename__ = "review_helpful_marks"
    __table_args__ = (UniqueConstraint("review_id", "user_id", name="uq_review_helpful_user"),)

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("workplace_reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)


class ReviewReply(Base):
    __tablename__ = "review_replies"

    id = Column(Integer, primary_key=True)
    review_id = Column(
        Integer, ForeignKey("workplace_reviews.id", ondelete="CASCADE"), unique=True, nullable=False,
    )
    employer_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    review = relationship("WorkplaceReview", back_populates="reply")
    employer_user = relationship("User")
