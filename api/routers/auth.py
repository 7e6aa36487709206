"""
Auth API Endpoints.

Single-admin login issuing a bearer token for the admin-only routes.
"""

from fastapi import APIRouter, Depends

from api.auth import AdminAuthenticator, AdminPrincipal, get_authenticator, require_admin
from api.models import LoginRequest

router = APIRouter()


@router.post(
    "/auth/login",
    summary="Admin Login",
    description="Exchange the admin email and password for a 24h bearer token.",
)
def login(request: LoginRequest, authenticator: AdminAuthenticator = Depends(get_authenticator)):
    """
    **Success response:**
    ```json
    {
      "token": "eyJhbGciOiJIUzI1NiIs...",
      "user": {"id": "admin", "name": "Admin", "email": "admin@example.org", "role": "admin"}
    }
    ```
    """
    token = authenticator.login(request.email, request.password)
    return {"token": token, "user": AdminPrincipal(email=request.email).summary()}


@router.get("/auth/me", summary="Current Admin")
def me(admin: AdminPrincipal = Depends(require_admin)):
    return admin.summary()
