"""
Job post and job application models.
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
from app.models.enums import JobApplicationStatus


class JobPost(Base):
    __tablename__ = "job_posts"

    id = Column(Integer, primary_key=True)
    employer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    workplace_id = Column(Integer, ForeignKey("workplaces.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    remote = Column(Boolean, nullable=False, default=False)
    location = Column(String(200), nullable=True)
    ethical_tags = Column(String(1000), nullable=True)  # comma separated
    inclusive_opportunity = Column(Boolean, nullable=False, default=False)
    min_salary = Column(Integer, nullable=True)
    max_salary = Column(Integer, nullable=True)
    contact = Column(String(255), nullable=True)
    posted_date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    employer = relationship("User")
    workplace = relationship("Workplace")
    applications = relationship(
        "JobApplication", back_populates="job_post",
        cascade="all, delete-orphan", passive_deletes=True,
    )


class JobApplication(Base):
    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_post_id", "job_seeker_id", name="uq_application_post_seeker"),
    )

    id = Column(Integer, primary_key=True)
    job_post_id = Column(Integer, ForeignKey("job_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    job_seeker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        Enum(JobApplicationStatus, native_enum=False, length=20),
        nullable=False, default=JobApplicationStatus.PENDING,
    )
    special_needs = Column(Text, nullable=True)
    cover_letter = Column(Text, nullable=True)
    feedback = Column(Text, nullable=True)
    cv_url = Column(String(500), nullable=True)
    applied_date = Column(DateTime, nullable=False, default=datetime.utcnow)

    job_post = relationship("JobPost", back_populates="applications")
    job_seeker = relationship("User")
