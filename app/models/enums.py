"""
Domain enums shared by the ORM models and the API schemas.
"""

from enum import Enum


class Role(str, Enum):
    ROLE_ADMIN = "ROLE_ADMIN"
    ROLE_EMPLOYER = "ROLE_EMPLOYER"
    ROLE_JOBSEEKER = "ROLE_JOBSEEKER"


class TokenPurpose(str, Enum):
    VERIFY_EMAIL = "VERIFY_EMAIL"
    RESET_PASSWORD = "RESET_PASSWORD"
    OTP = "OTP"


class JobApplicationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class VoteType(str, Enum):
    UPVOTE = "UPVOTE"
    DOWNVOTE = "DOWNVOTE"


class MentorshipRequestStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    CLOSED = "CLOSED"


class ResumeReviewStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CLOSED = "CLOSED"


class EmployerRole(str, Enum):
    OWNER = "OWNER"
    MANAGER = "MANAGER"


class EmployerRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class EthicalPolicy(str, Enum):
    SALARY_TRANSPARENCY = "SALARY_TRANSPARENCY"
    EQUAL_PAY_POLICY = "EQUAL_PAY_POLICY"
    LIVING_WAGE_EMPLOYER = "LIVING_WAGE_EMPLOYER"
    REMOTE_FRIENDLY = "REMOTE_FRIENDLY"
    FLEXIBLE_HOURS = "FLEXIBLE_HOURS"
    INCLUSIVE_HIRING = "INCLUSIVE_HIRING"
    DIVERSITY_AND_INCLUSION = "DIVERSITY_AND_INCLUSION"
    MENTORSHIP_PROGRAM = "MENTORSHIP_PROGRAM"
    WELLNESS_PROGRAM = "WELLNESS_PROGRAM"
    SUSTAINABILITY_FOCUS = "SUSTAINABILITY_FOCUS"

    @property
    def label(self) -> str:
        return _POLICY_LABELS[self]

    @classmethod
    def from_label(cls, value: str) -> "EthicalPolicy":
        """Accept either the enum name or its label, case-insensitively."""
        needle = value.strip().lower()
        for policy in cls:
            if needle in (policy.value.lower(), policy.label.lower()):
                return policy
        raise ValueError(f"Unknown ethical policy: {value}")


_POLICY_LABELS = {
    EthicalPolicy.SALARY_TRANSPARENCY: "Salary Transparency",
    EthicalPolicy.EQUAL_PAY_POLICY: "Equal Pay Policy",
    EthicalPolicy.LIVING_WAGE_EMPLOYER: "Living Wage Employer",
    EthicalPolicy.REMOTE_FRIENDLY: "Remote-Friendly",
    EthicalPolicy.FLEXIBLE_HOURS: "Flexible Hours",
    EthicalPolicy.INCLUSIVE_HIRING: "Inclusive Hiring",
    EthicalPolicy.DIVERSITY_AND_INCLUSION: "Diversity & Inclusion",
    EthicalPolicy.MENTORSHIP_PROGRAM: "Mentorship Program",
    EthicalPolicy.WELLNESS_PROGRAM: "Wellness Program",
    EthicalPolicy.SUSTAINABILITY_FOCUS: "Sustainability Focus",
}


class NotificationType(str, Enum):
    AWARDED_BADGE = "AWARDED_BADGE"
    JOB_APPLICATION_REQUEST = "JOB_APPLICATION_REQUEST"
    JOB_APPLICATION_APPROVED = "JOB_APPLICATION_APPROVED"
    JOB_APPLICATION_REJECTED = "JOB_APPLICATION_REJECTED"
    MENTORSHIP_REQUEST = "MENTORSHIP_REQUEST"
    MENTORSHIP_ACCEPTED = "MENTORSHIP_ACCEPTED"
    MENTORSHIP_REJECTED = "MENTORSHIP_REJECTED"
    NEW_MESSAGE = "NEW_MESSAGE"
    BROADCAST = "BROADCAST"


class ReportableEntityType(str, Enum):
    WORKPLACE = "WORKPLACE"
    REVIEW = "REVIEW"
    FORUM_POST = "FORUM_POST"
    FORUM_COMMENT = "FORUM_COMMENT"
    JOB_POST = "JOB_POST"
    JOB_APPLICATION = "JOB_APPLICATION"
    REVIEW_REPLY = "REVIEW_REPLY"
    PROFILE = "PROFILE"
    MENTOR = "MENTOR"


class ReportReasonType(str, Enum):
    SPAM = "SPAM"
    FAKE = "FAKE"
    OFFENSIVE = "OFFENSIVE"
    HARASSMENT = "HARASSMENT"
    OTHER = "OTHER"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class BadgeCriteria(str, Enum):
    FORUM_POSTS = "FORUM_POSTS"
    FORUM_COMMENTS = "FORUM_COMMENTS"
    COMMENT_UPVOTES = "COMMENT_UPVOTES"
    JOB_POSTS = "JOB_POSTS"
    JOB_APPLICATIONS = "JOB_APPLICATIONS"
    APPROVED_APPLICATIONS = "APPROVED_APPLICATIONS"
    MENTOR_PROFILE = "MENTOR_PROFILE"
    MENTEES_ACCEPTED = "MENTEES_ACCEPTED"
    MENTORSHIP_REQUESTS_SENT = "MENTORSHIP_REQUESTS_SENT"
    MENTORSHIPS_RECEIVED = "MENTORSHIPS_RECEIVED"
    MENTOR_RATINGS_GIVEN = "MENTOR_RATINGS_GIVEN"


class BadgeType(str, Enum):
    FIRST_VOICE = "FIRST_VOICE"
    COMMUNITY_PILLAR = "COMMUNITY_PILLAR"
    CONVERSATION_STARTER = "CONVERSATION_STARTER"
    DISCUSSION_DRIVER = "DISCUSSION_DRIVER"
    HELPFUL = "HELPFUL"
    VALUABLE_CONTRIBUTOR = "VALUABLE_CONTRIBUTOR"
    FIRST_LISTING = "FIRST_LISTING"
    HIRING_MACHINE = "HIRING_MACHINE"
    FIRST_STEP = "FIRST_STEP"
    PERSISTENT = "PERSISTENT"
    HIRED = "HIRED"
    CAREER_STAR = "CAREER_STAR"
    GUIDE = "GUIDE"
    FIRST_MENTEE = "FIRST_MENTEE"
    DEDICATED_MENTOR = "DEDICATED_MENTOR"
    SEEKING_GUIDANCE = "SEEKING_GUIDANCE"
    MENTORED = "MENTORED"
    FEEDBACK_GIVER = "FEEDBACK_GIVER"

    @property
    def display_name(self) -> str:
        return _BADGE_INFO[self][0]

    @property
    def description(self) -> str:
        return _BADGE_INFO[self][1]

    @property
    def criteria(self) -> BadgeCriteria:
        return _BADGE_INFO[self][2]

    @property
    def threshold(self) -> int:
        return _BADGE_INFO[self][3]

    @classmethod
    def for_criteria(cls, criteria: BadgeCriteria) -> list:
        return [badge for badge in cls if badge.criteria == criteria]


# name, description, criteria, threshold
_BADGE_INFO = {
    BadgeType.FIRST_VOICE: ("First Voice", "Created your first forum post", BadgeCriteria.FORUM_POSTS, 1),
    BadgeType.COMMUNITY_PILLAR: ("Community Pillar", "Created 25 forum posts", BadgeCriteria.FORUM_POSTS, 25),
    BadgeType.CONVERSATION_STARTER: ("Conversation Starter", "Wrote your first comment", BadgeCriteria.FORUM_COMMENTS, 1),
    BadgeType.DISCUSSION_DRIVER: ("Discussion Driver", "Wrote 50 comments", BadgeCriteria.FORUM_COMMENTS, 50),
    BadgeType.HELPFUL: ("Helpful", "Received 10 upvotes on your comments", BadgeCriteria.COMMENT_UPVOTES, 10),
    BadgeType.VALUABLE_CONTRIBUTOR: ("Valuable Contributor", "Received 50 upvotes on your comments", BadgeCriteria.COMMENT_UPVOTES, 50),
    BadgeType.FIRST_LISTING: ("First Listing", "Posted your first job", BadgeCriteria.JOB_POSTS, 1),
    BadgeType.HIRING_MACHINE: ("Hiring Machine", "Posted 15 jobs", BadgeCriteria.JOB_POSTS, 15),
    BadgeType.FIRST_STEP: ("First Step", "Submitted your first job application", BadgeCriteria.JOB_APPLICATIONS, 1),
    BadgeType.PERSISTENT: ("Persistent", "Submitted 15 job applications", BadgeCriteria.JOB_APPLICATIONS, 15),
    BadgeType.HIRED: ("Hired!", "Got your first job application approved", BadgeCriteria.APPROVED_APPLICATIONS, 1),
    BadgeType.CAREER_STAR: ("Career Star", "Got 5 job applications approved", BadgeCriteria.APPROVED_APPLICATIONS, 5),
    BadgeType.GUIDE: ("Guide", "Created a mentor profile", BadgeCriteria.MENTOR_PROFILE, 1),
    BadgeType.FIRST_MENTEE: ("First Mentee", "Accepted your first mentee", BadgeCriteria.MENTEES_ACCEPTED, 1),
    BadgeType.DEDICATED_MENTOR: ("Dedicated Mentor", "Accepted 5 mentees", BadgeCriteria.MENTEES_ACCEPTED, 5),
    BadgeType.SEEKING_GUIDANCE: ("Seeking Guidance", "Sent your first mentorship request", BadgeCriteria.MENTORSHIP_REQUESTS_SENT, 1),
    BadgeType.MENTORED: ("Mentored", "Got accepted by a mentor", BadgeCriteria.MENTORSHIPS_RECEIVED, 1),
    BadgeType.FEEDBACK_GIVER: ("Feedback Giver", "Rated a mentor", BadgeCriteria.MENTOR_RATINGS_GIVEN, 1),
}
