"""
Mentorship models - mentor profiles, requests, resume reviews, ratings and chat.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
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
from app.models.enums import MentorshipRequestStatus, ResumeReviewStatus


class MentorProfile(Base):
    """Mentor profile, keyed by the mentor's user id."""

    __tablename__ = "mentor_profiles"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    expertise = Column(JSON, nullable=False, default=list)
    max_mentees = Column(Integer, nullable=False)
    current_mentees = Column(Integer, nullable=False, default=0)
    average_rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User")
    reviews = relationship(
        "MentorReview", order_by="MentorReview.created_at",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def can_accept(self) -> bool:
        return self.current_mentees < self.max_mentees

    def record_rating(self, rating: int) -> None:
        """Fold a new rating into the running average."""
        total = self.average_rating * self.review_count + rating
        self.review_count += 1
        self.average_rating = total / self.review_count


class MentorshipRequest(Base):
    __tablename__ = "mentorship_requests"

    id = Column(Integer, primary_key=True)
    mentor_id = Column(Integer, ForeignKey("mentor_profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        Enum(MentorshipRequestStatus, native_enum=False, length=20),
        nullable=False, default=MentorshipRequestStatus.PENDING,
    )
    motivation = Column(Text, nullable=True)
    response_message = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    responded_at = Column(DateTime, nullable=True)

    mentor = relationship("MentorProfile")
    requester = relationship("User")
    resume_review = relationship(
        "ResumeReview", back_populates="request", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )


class ResumeReview(Base):
    """An accepted mentorship: one resume under review by one mentor."""

    __tablename__ = "resume_reviews"

    id = Column(Integer, primary_key=True)
    request_id = Column(
        Integer, ForeignKey("mentorship_requests.id", ondelete="CASCADE"), unique=True, nullable=False,
    )
    mentor_id = Column(Integer, ForeignKey("mentor_profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    job_seeker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        Enum(ResumeReviewStatus, native_enum=False, length=20),
        nullable=False, default=ResumeReviewStatus.ACTIVE,
    )
    resume_url = Column(String(500), nullable=True)
    resume_uploaded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    request = relationship("MentorshipRequest", back_populates="resume_review")
    mentor = relationship("MentorProfile")
    job_seeker = relationship("User")
    conversation = relationship(
        "Conversation", back_populates="resume_review", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )


class MentorReview(Base):
    __tablename__ = "mentor_reviews"
    __table_args__ = (UniqueConstraint("mentor_id", "reviewer_id", name="uq_mentor_review_pair"),)

    id = Column(Integer, primary_key=True)
    mentor_id = Column(Integer, ForeignKey("mentor_profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    resume_review_id = Column(Integer, ForeignKey("resume_reviews.id", ondelete="SET NULL"), nullable=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    reviewer = relationship("User")


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True)
    resume_review_id = Column(
        Integer, ForeignKey("resume_reviews.id", ondelete="CASCADE"), unique=True, nullable=False,
    )
    mentor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    mentee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    closed_at = Column(DateTime, nullable=True)

    resume_review = relationship("ResumeReview", back_populates="conversation")
    messages = relationship(
        "ChatMessage", order_by="ChatMessage.created_at",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None

    def has_participant(self, user_id: int) -> bool:
        return user_id in (self.mentor_id, self.mentee_id)


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)  # None for system messages
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    sender = relationship("User")
