from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import Optional
import logging

from ...core.config import settings
from ...core.database import get_db
from ...api.deps import (
    get_current_session, get_session_store, get_session_token, is_form_post, read_payload
)
from ...services.auth_service import AuthService
from ...services.session_store import SessionStore, SessionStoreError
from ...schemas.auth import (
    UserLogin, UserRegister, UserResponse, SessionUser, PublicUser, CurrentUserResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    db: Session = Depends(get_db)
):
    """Register a new user from a JSON body or an HTML form post."""
    user_data = await read_payload(request, UserRegister)
    auth_service = AuthService(db)
    user = auth_service.register_user(user_data)

    # Browser forms follow the redirect to the login page
    if is_form_post(request):
        return RedirectResponse("/login.html", status_code=status.HTTP_303_SEE_OTHER)

    return {
        "success": True,
        "message": "Registration successful. Please log in.",
        "user": UserResponse.model_validate(user),
        "redirect": "/login.html",
    }

@router.post("/login")
async def login(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """Authenticate user and start a server-side session."""
    login_data = await read_payload(request, UserLogin)
    auth_service = AuthService(db)
    identity = auth_service.authenticate_user(login_data)

    try:
        token = store.create(identity)
    except SessionStoreError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Login is temporarily unavailable"
        )

    logger.info(f"User {identity.username} logged in")

    if is_form_post(request):
        redirect = RedirectResponse("/index.html", status_code=status.HTTP_303_SEE_OTHER)
        _set_session_cookie(redirect, token)
        return redirect

    _set_session_cookie(response, token)

    return {
        "success": True,
        "message": "Login successful",
        "user": {"username": identity.username, "email": identity.email},
        "redirect": "/index.html",
    }

@router.get("/api/user", response_model=CurrentUserResponse, response_model_exclude_none=True)
async def current_user(
    current: Optional[SessionUser] = Depends(get_current_session)
):
    """Report whether the caller is logged in."""
    if current is None:
        return CurrentUserResponse(loggedIn=False)
    return CurrentUserResponse(
        loggedIn=True,
        user=PublicUser(username=current.username, email=current.email)
    )

@router.post("/logout")
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
):
    """Destroy the caller's session."""
    if token:
        try:
            store.destroy(token)
        except SessionStoreError:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error logging out. Please try again."
            )

    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True, "message": "Logged out successfully", "redirect": "/login.html"}

def _set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_EXPIRE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
