"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List, Dict, Generic, TypeVar
from datetime import datetime, date

from app.models.enums import (
    Role,
    JobApplicationStatus,
    MentorshipRequestStatus,
    ResumeReviewStatus,
    EmployerRole,
    EmployerRequestStatus,
    EthicalPolicy,
    NotificationType,
    ReportableEntityType,
    ReportReasonType,
    ReportStatus,
    BadgeType,
    BadgeCriteria,
)

T = TypeVar("T")


# ============================================================
# COMMON SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True


class PaginatedResponse(BaseModel, Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: Role
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    bio: Optional[str] = None
    pronoun_set: Optional[str] = None

    @field_validator("username")
    @classmethod
    def username_has_no_spaces(cls, v):
        if " " in v:
            raise ValueError("Username cannot contain spaces")
        return v


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    email: str
    role: Role


class OtpChallengeResponse(BaseModel):
    otp_required: bool = True
    temp_token: str
    message: str = "A one-time code has been sent to your email"


class OtpVerifyRequest(BaseModel):
    temp_token: str
    code: str = Field(..., min_length=6, max_length=6)


class VerifyEmailRequest(BaseModel):
    token: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirmRequest(BaseModel):
    token: str
    new_password: str = Field(..., min_length=8)


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8)


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: Role
    email_verified: bool
    created_at: datetime


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ProfileCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    bio: Optional[str] = None
    pronoun_set: Optional[str] = None


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = None
    pronoun_set: Optional[str] = None


class EducationRequest(BaseModel):
    school: str = Field(..., min_length=1)
    degree: str = Field(..., min_length=1)
    field: str = Field(..., min_length=1)
    start_date: date
    end_date: Optional[date] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class EducationUpdate(BaseModel):
    school: Optional[str] = None
    degree: Optional[str] = None
    field: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    description: Optional[str] = None


class EducationResponse(BaseModel):
    id: int
    school: str
    degree: str
    field: str
    start_date: date
    end_date: Optional[date]
    description: Optional[str]


class ExperienceRequest(BaseModel):
    company: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class ExperienceUpdate(BaseModel):
    company: Optional[str] = None
    position: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ExperienceResponse(BaseModel):
    id: int
    company: str
    position: str
    description: Optional[str]
    start_date: date
    end_date: Optional[date]


class SkillRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    level: Optional[str] = None


class SkillUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    level: Optional[str] = None


class SkillResponse(BaseModel):
    id: int
    name: str
    level: Optional[str]


class InterestRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class InterestResponse(BaseModel):
    id: int
    name: str


# ============================================================
# BADGE SCHEMAS
# ============================================================

class BadgeTypeResponse(BaseModel):
    badge_type: BadgeType
    name: str
    description: str
    criteria: BadgeCriteria
    threshold: int


class BadgeResponse(BadgeTypeResponse):
    id: int
    user_id: int
    earned_at: datetime


class ProfileResponse(BaseModel):
    id: int
    user_id: int
    username: str
    first_name: str
    last_name: str
    bio: Optional[str]
    pronoun_set: Optional[str]
    image_url: Optional[str]
    educations: List[EducationResponse] = []
    experiences: List[ExperienceResponse] = []
    skills: List[SkillResponse] = []
    interests: List[InterestResponse] = []
    badges: List[BadgeResponse] = []


class ImageResponse(BaseModel):
    image_url: Optional[str]
    updated_at: datetime


# ============================================================
# JOB POST SCHEMAS
# ============================================================

class JobPostCreate(BaseModel):
    workplace_id: int
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=1)
    remote: bool = False
    location: Optional[str] = None
    ethical_tags: List[str] = []
    inclusive_opportunity: bool = False
    min_salary: Optional[int] = Field(None, ge=0)
    max_salary: Optional[int] = Field(None, ge=0)
    contact: Optional[str] = None

    @model_validator(mode="after")
    def check_salary_range(self):
        if self.min_salary is not None and self.max_salary is not None and self.min_salary > self.max_salary:
            raise ValueError("min_salary cannot be greater than max_salary")
        return self


class JobPostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    remote: Optional[bool] = None
    location: Optional[str] = None
    ethical_tags: Optional[List[str]] = None
    inclusive_opportunity: Optional[bool] = None
    min_salary: Optional[int] = Field(None, ge=0)
    max_salary: Optional[int] = Field(None, ge=0)
    contact: Optional[str] = None


class JobPostResponse(BaseModel):
    id: int
    employer_id: int
    workplace_id: int
    company_name: str
    title: str
    description: str
    remote: bool
    location: Optional[str]
    ethical_tags: List[str]
    inclusive_opportunity: bool
    min_salary: Optional[int]
    max_salary: Optional[int]
    contact: Optional[str]
    posted_date: datetime


# ============================================================
# JOB APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    job_post_id: int
    special_needs: Optional[str] = None
    cover_letter: Optional[str] = None


class ApplicationDecision(BaseModel):
    feedback: Optional[str] = None


class ApplicationResponse(BaseModel):
    id: int
    job_post_id: int
    job_title: str
    company_name: str
    workplace_id: int
    job_seeker_id: int
    applicant_name: str
    status: JobApplicationStatus
    special_needs: Optional[str]
    cover_letter: Optional[str]
    feedback: Optional[str]
    cv_url: Optional[str]
    applied_date: datetime


class CvResponse(BaseModel):
    application_id: int
    cv_url: str


# ============================================================
# FORUM SCHEMAS
# ============================================================

class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    tags: List[str] = []


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    tags: Optional[List[str]] = None


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)
    parent_comment_id: Optional[int] = None


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    id: int
    post_id: int
    author_id: int
    author_username: str
    parent_comment_id: Optional[int]
    content: str
    upvote_count: int
    downvote_count: int
    created_at: datetime
    updated_at: datetime


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    tags: List[str]
    author_id: int
    author_username: str
    upvote_count: int
    downvote_count: int
    comment_count: int
    comments: List[CommentResponse] = []
    has_user_upvoted: bool = False
    has_user_downvoted: bool = False
    created_at: datetime
    updated_at: datetime


# ============================================================
# MENTORSHIP SCHEMAS
# ============================================================

class MentorProfileCreate(BaseModel):
    expertise: List[str] = Field(..., min_length=1)
    max_mentees: int = Field(..., ge=1, le=50)


class MentorProfileUpdate(BaseModel):
    expertise: List[str] = Field(..., min_length=1)
    max_mentees: int = Field(..., ge=1, le=50)


class MentorReviewResponse(BaseModel):
    id: int
    reviewer_username: str
    rating: int
    comment: Optional[str]
    created_at: datetime


class MentorProfileResponse(BaseModel):
    user_id: int
    username: str
    expertise: List[str]
    current_mentees: int
    max_mentees: int
    average_rating: float
    review_count: int
    reviews: List[MentorReviewResponse] = []


class MentorshipRequestCreate(BaseModel):
    mentor_id: int
    motivation: str = Field(..., min_length=1, max_length=2000)


class MentorshipRespondRequest(BaseModel):
    accept: bool
    response_message: Optional[str] = None


class MentorshipRequestResponse(BaseModel):
    id: int
    mentor_id: int
    mentor_username: str
    requester_id: int
    requester_username: str
    status: MentorshipRequestStatus
    motivation: Optional[str]
    response_message: Optional[str]
    created_at: datetime
    resume_review_id: Optional[int] = None
    review_status: Optional[ResumeReviewStatus] = None
    conversation_id: Optional[int] = None


class ResumeReviewResponse(BaseModel):
    id: int
    request_id: int
    mentor_id: int
    job_seeker_id: int
    status: ResumeReviewStatus
    resume_url: Optional[str]
    resume_uploaded_at: Optional[datetime]
    created_at: datetime
    conversation_id: Optional[int]


class ResumeFileResponse(BaseModel):
    resume_review_id: int
    resume_url: str
    uploaded_at: Optional[datetime]


class RatingCreate(BaseModel):
    resume_review_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ChatMessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class ChatMessageResponse(BaseModel):
    id: int
    conversation_id: int
    sender_id: Optional[int]
    sender_username: str
    content: str
    created_at: datetime


# ============================================================
# WORKPLACE SCHEMAS
# ============================================================

def _parse_policies(value):
    if value is None:
        return value
    return [v if isinstance(v, EthicalPolicy) else EthicalPolicy.from_label(str(v)) for v in value]


class WorkplaceCreate(BaseModel):
    company_name: str = Field(..., min_length=2, max_length=200)
    sector: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=200)
    short_description: Optional[str] = Field(None, max_length=500)
    detailed_description: Optional[str] = None
    website: Optional[str] = None
    ethical_tags: List[EthicalPolicy] = []

    @field_validator("ethical_tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        return _parse_policies(v)


class WorkplaceUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=2, max_length=200)
    sector: Optional[str] = None
    location: Optional[str] = None
    short_description: Optional[str] = Field(None, max_length=500)
    detailed_description: Optional[str] = None
    website: Optional[str] = None
    ethical_tags: Optional[List[EthicalPolicy]] = None

    @field_validator("ethical_tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        return _parse_policies(v)


class WorkplaceRatingResponse(BaseModel):
    workplace_id: int
    overall_avg: Optional[float]
    review_count: int
    policy_averages: Dict[str, float] = {}


class EmployerResponse(BaseModel):
    user_id: int
    username: str
    email: str
    role: EmployerRole
    joined_at: datetime


class WorkplaceSummaryResponse(BaseModel):
    id: int
    company_name: str
    sector: str
    location: str
    short_description: Optional[str]
    image_url: Optional[str]
    ethical_tags: List[EthicalPolicy]
    overall_avg: Optional[float]
    review_count: int


class ReplyRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class ReplyResponse(BaseModel):
    id: int
    review_id: int
    employer_user_id: int
    employer_username: str
    workplace_name: str
    content: str
    created_at: datetime
    updated_at: datetime


class ReviewCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    anonymous: bool = False
    overall_rating: Optional[float] = Field(None, ge=1, le=5)
    policy_ratings: Dict[str, int] = {}

    @field_validator("policy_ratings")
    @classmethod
    def check_scores(cls, v):
        for key, score in v.items():
            if score < 1 or score > 5:
                raise ValueError(f"Rating for '{key}' must be between 1 and 5")
        return v

    @model_validator(mode="after")
    def check_has_rating(self):
        if not self.policy_ratings and self.overall_rating is None:
            raise ValueError("Either policy_ratings or overall_rating is required")
        return self


class ReviewUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    anonymous: Optional[bool] = None
    overall_rating: Optional[float] = Field(None, ge=1, le=5)
    policy_ratings: Optional[Dict[str, int]] = None

    @field_validator("policy_ratings")
    @classmethod
    def check_scores(cls, v):
        for key, score in (v or {}).items():
            if score < 1 or score > 5:
                raise ValueError(f"Rating for '{key}' must be between 1 and 5")
        return v


class ReviewResponse(BaseModel):
    id: int
    workplace_id: int
    user_id: Optional[int]
    username: str
    title: Optional[str]
    content: Optional[str]
    anonymous: bool
    overall_rating: float
    policy_ratings: Dict[str, int]
    helpful_count: int
    helpful_by_user: bool = False
    reply: Optional[ReplyResponse] = None
    created_at: datetime
    updated_at: datetime


class WorkplaceDetailResponse(WorkplaceSummaryResponse):
    detailed_description: Optional[str]
    website: Optional[str]
    created_at: datetime
    employers: List[EmployerResponse] = []
    rating: WorkplaceRatingResponse
    recent_reviews: List[ReviewResponse] = []


class EmployerWorkplaceResponse(BaseModel):
    workplace: WorkplaceSummaryResponse
    role: EmployerRole


class EmployerRequestCreate(BaseModel):
    note: Optional[str] = Field(None, max_length=1000)


class EmployerRequestResolve(BaseModel):
    action: str


class EmployerRequestResponse(BaseModel):
    id: int
    workplace_id: int
    workplace_name: str
    requester_id: int
    requester_username: str
    note: Optional[str]
    status: EmployerRequestStatus
    created_at: datetime
    resolved_at: Optional[datetime]


class WorkplaceReportRequest(BaseModel):
    reason_type: ReportReasonType
    description: Optional[str] = Field(None, max_length=2000)


# ============================================================
# NOTIFICATION SCHEMAS
# ============================================================

class NotificationResponse(BaseModel):
    id: int
    title: str
    notification_type: NotificationType
    message: str
    link_id: Optional[int]
    read: bool
    created_at: datetime


class BroadcastRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)


# ============================================================
# REPORT / ADMIN SCHEMAS
# ============================================================

class ReportCreate(BaseModel):
    entity_type: ReportableEntityType
    entity_id: int
    reason_type: ReportReasonType
    description: Optional[str] = Field(None, max_length=2000)


class ReportResponse(BaseModel):
    id: int
    entity_type: ReportableEntityType
    entity_id: int
    entity_name: str
    created_by: int
    created_by_username: str
    reason_type: ReportReasonType
    description: Optional[str]
    status: ReportStatus
    admin_note: Optional[str]
    created_at: datetime
    resolved_at: Optional[datetime]


class ResolveReportRequest(BaseModel):
    status: ReportStatus
    admin_note: Optional[str] = None
    delete_content: bool = False
    ban_user: bool = False
    ban_reason: Optional[str] = None

    @field_validator("status")
    @classmethod
    def status_is_final(cls, v):
        if v == ReportStatus.PENDING:
            raise ValueError("Resolution status must be APPROVED or REJECTED")
        return v


class BanUserRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class AdminUserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: Role
    is_banned: bool
    ban_reason: Optional[str]
    is_mentor_banned: bool
    mentor_ban_reason: Optional[str]


# ============================================================
# DASHBOARD SCHEMAS
# ============================================================

class DashboardStatsResponse(BaseModel):
    total_users: int
    total_employers: int
    total_job_seekers: int
    total_job_posts: int
    remote_job_posts: int
    inclusive_job_posts: int
    new_job_posts_this_week: int
    total_applications: int
    pending_applications: int
    approved_applications: int
    rejected_applications: int
    total_mentors: int
    active_mentorships: int
    completed_mentorships: int
    pending_mentorship_requests: int
    total_forum_posts: int
    total_forum_comments: int
    new_forum_posts_this_week: int
