"""
Profile Routes

POST /profile - Create own profile
GET /profile - Get own profile
PUT /profile - Update own profile
GET /profile/{user_id} - Public profile of a user
POST /profile/image - Upload profile image (PNG/JPEG/WEBP)
DELETE /profile/image - Remove profile image
POST /profile/education - Add education
PUT /profile/education/{education_id} - Update education
DELETE /profile/education/{education_id} - Remove education
POST /profile/experience - Add experience
PUT /profile/experience/{experience_id} - Update experience
DELETE /profile/experience/{experience_id} - Remove experience
POST /profile/skill - Add skill
PUT /profile/skill/{skill_id} - Update skill
DELETE /profile/skill/{skill_id} - Remove skill
POST /profile/interest - Add interest
PUT /profile/interest/{interest_id} - Update interest
DELETE /profile/interest/{interest_id} - Remove interest
"""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.db.postgres import get_db
from app.models import User
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
    MessageResponse,
    ProfileCreate,
    ProfileResponse,
    ProfileUpdate,
    SkillRequest,
    SkillResponse,
    SkillUpdate,
)
from app.services import profile_service

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.post("", response_model=ProfileResponse, status_code=201)
async def create_profile(data: ProfileCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_service.create_profile(db, user, data)


@router.get("", response_model=ProfileResponse)
async def get_my_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_service.to_profile_response(db, profile_service.get_profile_entity(db, user.id))


@router.put("", response_model=ProfileResponse)
async def update_profile(data: ProfileUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Update profile. At least one field must be provided."""
    return profile_service.update_profile(db, user, data)


# ============================================================
# IMAGE
# ============================================================

@router.post("/image", response_model=ImageResponse)
async def upload_image(
    file: UploadFile = File(..., description="Profile image (PNG, JPEG or WEBP)"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return await profile_service.upload_image(db, user, file)


@router.delete("/image", response_model=MessageResponse)
async def delete_image(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile_service.delete_image(db, user)
    return MessageResponse(message="Profile image removed")


# ============================================================
# EDUCATION
# ============================================================

@router.post("/education", response_model=EducationResponse, status_code=201)
async def add_education(data: EducationRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_service.add_education(db, user, data)


@router.put("/education/{education_id}", response_model=EducationResponse)
async def update_education(
    education_id: int, data: EducationUpdate,
    user: User = Depends(get_current_user), db: Session = Depends(get_db),
):
    return profile_service.update_education(db, user, education_id, data)


@router.delete("/education/{education_id}", response_model=MessageResponse)
async def delete_education(education_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile_service.delete_education(db, user, education_id)
    return MessageResponse(message="Education removed")


# ============================================================
# EXPERIENCE
# ============================================================

@router.post("/experience", response_model=ExperienceResponse, status_code=201)
async def add_experience(data: ExperienceRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_service.add_experience(db, user, data)


@router.put("/experience/{experience_id}", response_model=ExperienceResponse)
async def update_experience(
    experience_id: int, data: ExperienceUpdate,
    user: User = Depends(get_current_user), db: Session = Depends(get_db),
):
    return profile_service.update_experience(db, user, experience_id, data)


@router.delete("/experience/{experience_id}", response_model=MessageResponse)
async def delete_experience(experience_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile_service.delete_experience(db, user, experience_id)
    return MessageResponse(message="Experience removed")


# ============================================================
# SKILLS / INTERESTS
# ============================================================

@router.post("/skill", response_model=SkillResponse, status_code=201)
async def add_skill(data: SkillRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_service.add_skill(db, user, data)


@router.put("/skill/{skill_id}", response_model=SkillResponse)
async def update_skill(skill_id: int, data: SkillUpdate,
                       user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_service.update_skill(db, user, skill_id, data)


@router.delete("/skill/{skill_id}", response_model=MessageResponse)
async def delete_skill(skill_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile_service.delete_skill(db, user, skill_id)
    return MessageResponse(message="Skill removed")


@router.post("/interest", response_model=InterestResponse, status_code=201)
async def add_interest(data: InterestRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_service.add_interest(db, user, data)


@router.put("/interest/{interest_id}", response_model=InterestResponse)
async def update_interest(interest_id: int, data: InterestRequest,
                          user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profile_service.update_interest(db, user, interest_id, data)


@router.delete("/interest/{interest_id}", response_model=MessageResponse)
async def delete_interest(interest_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile_service.delete_interest(db, user, interest_id)
    return MessageResponse(message="Interest removed")


# Registered last so /image, /education... are not captured as a user id
@router.get("/{user_id}", response_model=ProfileResponse)
async def get_public_profile(user_id: int, db: Session = Depends(get_db)):
    return profile_service.to_profile_response(db, profile_service.get_profile_entity(db, user_id))
