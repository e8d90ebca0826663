"""
Models module - SQLAlchemy ORM entities.

Importing this package registers every mapper on ``Base.metadata``.
"""

from app.models.user import User, AuthToken, Profile, Education, Experience, Skill, Interest
from app.models.workplace import (
    Workplace,
    EmployerWorkplace,
    EmployerRequest,
    WorkplaceReview,
    ReviewPolicyRating,
    ReviewHelpful,
    ReviewReply,
)
from app.models.job import JobPost, JobApplication
from app.models.forum import ForumPost, ForumComment, PostVote, CommentVote
from app.models.mentorship import (
    MentorProfile,
    MentorshipRequest,
    ResumeReview,
    MentorReview,
    Conversation,
    ChatMessage,
)
from app.models.community import Badge, Notification, Report

__all__ = [
    "User", "AuthToken", "Profile", "Education", "Experience", "Skill", "Interest",
    "Workplace", "EmployerWorkplace", "EmployerRequest", "WorkplaceReview",
    "ReviewPolicyRating", "ReviewHelpful", "ReviewReply",
    "JobPost", "JobApplication",
    "ForumPost", "ForumComment", "PostVote", "CommentVote",
    "MentorProfile", "MentorshipRequest", "ResumeReview", "MentorReview",
    "Conversation", "ChatMessage",
    "Badge", "Notification", "Report",
]
