"""
Forum models - posts, threaded comments and votes.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
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
from app.models.enums import VoteType


class ForumPost(Base):
    __tablename__ = "forum_posts"

    id = Column(Integer, primary_key=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship("User")
    comments = relationship(
        "ForumComment", back_populates="post", order_by="ForumComment.created_at",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    votes = relationship("PostVote", cascade="all, delete-orphan", passive_deletes=True)


class ForumComment(Base):
    __tablename__ = "forum_comments"

    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey("forum_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_comment_id = Column(Integer, ForeignKey("forum_comments.id", ondelete="CASCADE"), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    post = relationship("ForumPost", back_populates="comments")
    author = relationship("User")
    votes = relationship("CommentVote", cascade="all, delete-orphan", passive_deletes=True)


class PostVote(Base):
    __tablename__ = "forum_post_votes"
    __table_args__ = (UniqueConstraint("user_id", "post_id", name="uq_post_vote_user_post"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    post_id = Column(Integer, ForeignKey("forum_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    vote_type = Column(Enum(VoteType, native_enum=False, length=10), nullable=False)


class CommentVote(Base):
    __tablename__ = "forum_comment_votes"
    __table_args__ = (UniqueConstraint("user_id", "comment_id", name="uq_comment_vote_user_comment"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    comment_id = Column(Integer, ForeignKey("forum_comments.id", ondelete="CASCADE"), nullable=False, index=True)
    vote_type = Column(Enum(VoteType, native_enum=False, length=10), nullable=False)
