"""
Profile Service

One profile per user plus its education, experience, skill and interest
lists.
"""

import structlog
from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.core.exceptions import AppError, ErrorCode
from app.models import Education, Experience, Interest, Profile, Skill, User
from app.schemas.schemas import (
    EducationRequest,
    EducationResponse,
    EducationUpdate,
    ExperienceRequest,
    ExperienceResponse,
    ExperienceUpdate,
    ImageResponse,
    InterestRequest,
    InterestResponse,
    ProfileCreate,
    ProfileResponse,
    ProfileUpdate,
    SkillRequest,
    SkillResponse,
    SkillUpdate,
)
from app.services.badge_service import get_user_badges
from app.utils.file_upload import delete_stored_file, save_image

logger = structlog.get_logger()


def get_profile_entity(db: Session, user_id: int) -> Profile:
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if not profile:
        raise AppError(ErrorCode.PROFILE_NOT_FOUND, "Profile not found")
    return profile


def to_profile_response(db: Session, profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        user_id=profile.user_id,
        username=profile.user.username,
        first_name=profile.first_name,
        last_name=profile.last_name,
        bio=profile.bio,
        pronoun_set=profile.pronoun_set,
        image_url=profile.image_url,
        educations=[_education(e) for e in profile.educations],
        experiences=[_experience(e) for e in profile.experiences],
        skills=[SkillResponse(id=s.id, name=s.name, level=s.level) for s in profile.skills],
        interests=[InterestResponse(id=i.id, name=i.name) for i in profile.interests],
        badges=get_user_badges(db, profile.user_id),
    )


def _education(e: Education) -> EducationResponse:
    return EducationResponse(
        id=e.id, school=e.school, degree=e.degree, field=e.field,
        start_date=e.start_date, end_date=e.end_date, description=e.description,
    )


def _experience(e: Experience) -> ExperienceResponse:
    return ExperienceResponse(
        id=e.id, company=e.company, position=e.position, description=e.description,
        start_date=e.start_date, end_date=e.end_date,
    )


def _apply_changes(entity, changes: dict) -> None:
    if not changes:
        raise AppError(ErrorCode.VALIDATION_ERROR, "No changes provided")
    for key, value in changes.items():
        setattr(entity, key, value)


def _check_dates(start_date, end_date) -> None:
    if start_date and end_date and end_date < start_date:
        raise AppError(ErrorCode.VALIDATION_ERROR, "end_date cannot be before start_date")


# ============================================================
# PROFILE
# ============================================================

def create_profile(db: Session, user: User, request: ProfileCreate) -> ProfileResponse:
    if db.query(Profile.id).filter(Profile.user_id == user.id).first():
        raise AppError(ErrorCode.PROFILE_ALREADY_EXISTS, "Profile already exists")

    profile = Profile(user_id=user.id, **request.model_dump())
    db.add(profile)
    db.commit()
    logger.info("Profile created", user_id=user.id)
    return to_profile_response(db, profile)


def update_profile(db: Session, user: User, request: ProfileUpdate) -> ProfileResponse:
    profile = get_profile_entity(db, user.id)
    _apply_changes(profile, request.model_dump(exclude_unset=True))
    db.commit()
    return to_profile_response(db, profile)


async def upload_image(db: Session, user: User, file: UploadFile) -> ImageResponse:
    profile = get_profile_entity(db, user.id)
    url = await save_image(file, "profiles")
    if profile.image_url:
        delete_stored_file(profile.image_url)
    profile.image_url = url
    db.commit()
    return ImageResponse(image_url=profile.image_url, updated_at=profile.updated_at)


def delete_image(db: Session, user: User) -> None:
    profile = get_profile_entity(db, user.id)
    if profile.image_url:
        delete_stored_file(profile.image_url)
        profile.image_url = None
        db.commit()


# ============================================================
# EDUCATION / EXPERIENCE / SKILL / INTEREST
# ============================================================

def _get_child(db: Session, model, child_id: int, profile: Profile, code: ErrorCode, label: str):
    child = db.get(model, child_id)
    if not child or child.profile_id != profile.id:
        raise AppError(code, f"{label} not found")
    return child


def add_education(db: Session, user: User, request: EducationRequest) -> EducationResponse:
    profile = get_profile_entity(db, user.id)
    education = Education(profile_id=profile.id, **request.model_dump())
    db.add(education)
    db.commit()
    return _education(education)


def update_education(db: Session, user: User, education_id: int, request: EducationUpdate) -> EducationResponse:
    profile = get_profile_entity(db, user.id)
    education = _get_child(db, Education, education_id, profile, ErrorCode.EDUCATION_NOT_FOUND, "Education")
    changes = request.model_dump(exclude_unset=True)
    _check_dates(changes.get("start_date", education.start_date), changes.get("end_date", education.end_date))
    _apply_changes(education, changes)
    db.commit()
    return _education(education)


def delete_education(db: Session, user: User, education_id: int) -> None:
    profile = get_profile_entity(db, user.id)
    db.delete(_get_child(db, Education, education_id, profile, ErrorCode.EDUCATION_NOT_FOUND, "Education"))
    db.commit()


def add_experience(db: Session, user: User, request: ExperienceRequest) -> ExperienceResponse:
    profile = get_profile_entity(db, user.id)
    experience = Experience(profile_id=profile.id, **request.model_dump())
    db.add(experience)
    db.commit()
    return _experience(experience)


def update_experience(db: Session, user: User, experience_id: int, request: ExperienceUpdate) -> ExperienceResponse:
    profile = get_profile_entity(db, user.id)
    experience = _get_child(db, Experience, experience_id, profile, ErrorCode.EXPERIENCE_NOT_FOUND, "Experience")
    changes = request.model_dump(exclude_unset=True)
    _check_dates(changes.get("start_date", experience.start_date), changes.get("end_date", experience.end_date))
    _apply_changes(experience, changes)
    db.commit()
    return _experience(experience)


def delete_experience(db: Session, user: User, experience_id: int) -> None:
    profile = get_profile_entity(db, user.id)
    db.delete(_get_child(db, Experience, experience_id, profile, ErrorCode.EXPERIENCE_NOT_FOUND, "Experience"))
    db.commit()


def add_skill(db: Session, user: User, request: SkillRequest) -> SkillResponse:
    profile = get_profile_entity(db, user.id)
    skill = Skill(profile_id=profile.id, name=request.name, level=request.level)
    db.add(skill)
    db.commit()
    return SkillResponse(id=skill.id, name=skill.name, level=skill.level)


def update_skill(db: Session, user: User, skill_id: int, request: SkillUpdate) -> SkillResponse:
    profile = get_profile_entity(db, user.id)
    skill = _get_child(db, Skill, skill_id, profile, ErrorCode.SKILL_NOT_FOUND, "Skill")
    _apply_changes(skill, request.model_dump(exclude_unset=True))
    db.commit()
    return SkillResponse(id=skill.id, name=skill.name, level=skill.level)


def delete_skill(db: Session, user: User, skill_id: int) -> None:
    profile = get_profile_entity(db, user.id)
    db.delete(_get_child(db, Skill, skill_id, profile, ErrorCode.SKILL_NOT_FOUND, "Skill"))
    db.commit()


def add_interest(db: Session, user: User, request: InterestRequest) -> InterestResponse:
    profile = get_profile_entity(db, user.id)
    interest = Interest(profile_id=profile.id, name=request.name)
    db.add(interest)
    db.commit()
    return InterestResponse(id=interest.id, name=interest.name)


def update_interest(db: Session, user: User, interest_id: int, request: InterestRequest) -> InterestResponse:
    profile = get_profile_entity(db, user.id)
    interest = _get_child(db, Interest, interest_id, profile, ErrorCode.INTEREST_NOT_FOUND, "Interest")
    interest.name = request.name
    db.commit()
    return InterestResponse(id=interest.id, name=interest.name)


def delete_interest(db: Session, user: User, interest_id: int) -> None:
    profile = get_profile_entity(db, user.id)
    db.delete(_get_child(db, Interest, interest_id, profile, ErrorCode.INTEREST_NOT_FOUND, "Interest"))
    db.commit()
