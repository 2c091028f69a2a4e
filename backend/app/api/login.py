"""Login endpoint for the single application owner."""

from fastapi import APIRouter, Depends, HTTPException, status

from backend.app.core.security import create_access_token, verify_app_password
from backend.app.dependencies.auth import get_current_user
from backend.app.schemas.login import LoginRequest, TokenRead

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenRead)
def login(credentials: LoginRequest):
    if not credentials.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Password is required")
    if not verify_app_password(credentials.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
    return {"access_token": create_access_token(), "token_type": "bearer"}


@router.get("/verify")
def verify_session(current_user: str = Depends(get_current_user)):
    return {"valid": True, "subject": current_user}
