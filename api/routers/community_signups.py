"""
Community Signups API Endpoints.
"""

from fastapi import APIRouter

from api.models import CommunitySignupRequest
from api.serializers import signup_to_json
from repositories import inquiry_repository

router = APIRouter()


@router.post("/community-signups", status_code=201, summary="Join Community")
def sign_up(request: CommunitySignupRequest):
    signup = inquiry_repository.create_community_signup(request.name, request.email)
    return {"message": "Registration successful!", "data": signup_to_json(signup)}
