"""
Mentorship Routes

GET /mentorship - List mentors with their reviews
POST /mentorship/mentor - Create own mentor profile
GET /mentorship/mentor/{user_id} - Get mentor profile
PUT /mentorship/mentor/{user_id} - Update own mentor profile
DELETE /mentorship/mentor/{user_id} - Delete own mentor profile
POST /mentorship/requests - Request mentorship
GET /mentorship/requests/{request_id} - Get request (mentor or requester)
PATCH /mentorship/requests/{request_id}/respond - Accept or decline (mentor)
PATCH /mentorship/requests/{request_id}/cancel - Cancel pending request (requester)
GET /mentorship/mentor/{mentor_id}/requests - Requests received (mentor)
GET /mentorship/mentee/{mentee_id}/requests - Requests sent (mentee)
POST /mentorship/ratings - Rate a mentor after a completed review
PATCH /mentorship/review/{resume_review_id}/complete - Complete mentorship
PATCH /mentorship/review/{resume_review_id}/close - Close mentorship
GET /mentorship/{resume_review_id} - Get resume review
POST /mentorship/{resume_review_id}/file - Upload resume (PDF)
GET /mentorship/{resume_review_id}/file - Get resume link
"""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.db.postgres import get_db
from app.models import User
from app.schemas.schemas import (
    MentorProfileCreate,
    MentorProfileResponse,
    MentorProfileUpdate,
    MentorshipRequestCreate,
    MentorshipRequestResponse,
    MentorshipRespondRequest,
    MessageResponse,
    RatingCreate,
    ResumeFileResponse,
    ResumeReviewResponse,
)
from app.services import mentorship_service

router = APIRouter(prefix="/mentorship", tags=["Mentorship"])


# ============================================================
# MENTOR PROFILES
# ============================================================

@router.get("", response_model=List[MentorProfileResponse])
async def list_mentors(db: Session = Depends(get_db)):
    return mentorship_service.list_mentors(db)


@router.post("/mentor", response_model=MentorProfileResponse, status_code=201)
async def create_mentor_profile(data: MentorProfileCreate,
                                user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return mentorship_service.create_mentor_profile(db, user, data)


@router.get("/mentor/{user_id}", response_model=MentorProfileResponse)
async def get_mentor_profile(user_id: int, db: Session = Depends(get_db)):
    return mentorship_service.get_mentor_profile(db, user_id)


@router.put("/mentor/{user_id}", response_model=MentorProfileResponse)
async def update_mentor_profile(user_id: int, data: MentorProfileUpdate,
                                user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return mentorship_service.update_mentor_profile(db, user_id, user, data)


@router.delete("/mentor/{user_id}", response_model=MessageResponse)
async def delete_mentor_profile(user_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    mentorship_service.delete_mentor_profile(db, user_id, user)
    return MessageResponse(message="Mentor profile deleted")


# ============================================================
# REQUESTS
# ============================================================

@router.post("/requests", response_model=MentorshipRequestResponse, status_code=201)
async def create_request(data: MentorshipRequestCreate,
                         user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return mentorship_service.create_request(db, user, data)


@router.get("/requests/{request_id}", response_model=MentorshipRequestResponse)
async def get_request(request_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return mentorship_service.get_request(db, request_id, user)


@router.patch("/requests/{request_id}/respond", response_model=MentorshipRequestResponse)
async def respond_to_request(request_id: int, data: MentorshipRespondRequest,
                             user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Accepting opens a resume review and its conversation."""
    return mentorship_service.respond_to_request(db, request_id, user, data)


@router.patch("/requests/{request_id}/cancel", response_model=MentorshipRequestResponse)
async def cancel_request(request_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return mentorship_service.cancel_request(db, request_id, user)


@router.get("/mentor/{mentor_id}/requests", response_model=List[MentorshipRequestResponse])
async def list_requests_of_mentor(mentor_id: int, user: User = Depends(get_current_user),
                                  db: Session = Depends(get_db)):
    return mentorship_service.list_requests_of_mentor(db, mentor_id, user)


@router.get("/mentee/{mentee_id}/requests", response_model=List[MentorshipRequestResponse])
async def list_requests_of_mentee(mentee_id: int, user: User = Depends(get_current_user),
                                  db: Session = Depends(get_db)):
    return mentorship_service.list_requests_of_mentee(db, mentee_id, user)


# ============================================================
# RESUME REVIEWS
# ============================================================

@router.post("/ratings", response_model=MentorProfileResponse, status_code=201)
async def rate_mentor(data: RatingCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return mentorship_service.rate_mentor(db, user, data)


@router.patch("/review/{resume_review_id}/complete", response_model=ResumeReviewResponse)
async def complete_mentorship(resume_review_id: int, user: User = Depends(get_current_user),
                              db: Session = Depends(get_db)):
    return mentorship_service.complete_mentorship(db, resume_review_id, user)


@router.patch("/review/{resume_review_id}/close", response_model=ResumeReviewResponse)
async def close_mentorship(resume_review_id: int, user: User = Depends(get_current_user),
                           db: Session = Depends(get_db)):
    return mentorship_service.close_mentorship(db, resume_review_id, user)


@router.get("/{resume_review_id}", response_model=ResumeReviewResponse)
async def get_resume_review(resume_review_id: int, user: User = Depends(get_current_user),
                            db: Session = Depends(get_db)):
    return mentorship_service.get_resume_review(db, resume_review_id, user)


@router.post("/{resume_review_id}/file", response_model=ResumeFileResponse)
async def upload_resume_file(
    resume_review_id: int,
    file: UploadFile = File(..., description="Resume file (PDF)"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return await mentorship_service.upload_resume_file(db, resume_review_id, user, file)


@router.get("/{resume_review_id}/file", response_model=ResumeFileResponse)
async def get_resume_file(resume_review_id: int, user: User = Depends(get_current_user),
                          db: Session = Depends(get_db)):
    return mentorship_service.get_resume_file(db, resume_review_id, user)
