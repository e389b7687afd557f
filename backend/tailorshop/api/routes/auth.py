"""Authentication routes."""

import logging

from fastapi import APIRouter, HTTPException, Request, Response, status

from tailorshop.api.deps import client_ip
from tailorshop.core.rate_limit import limiter
from tailorshop.core.rbac import CurrentUser, RequireAdmin
from tailorshop.core.security import (
    ACCESS_TOKEN_MAX_AGE,
    COOKIE_ACCESS_NAME,
    COOKIE_CSRF_NAME,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    blacklist_token,
    create_access_token,
    generate_csrf_token,
    get_password_hash,
    verify_password,
)
from tailorshop.db.session import DbSession
from tailorshop.models.user import User
from tailorshop.schemas.auth import LoginRequest, Token, UserCreate, UserResponse

logger = logging.getLogger("auth")

router = APIRouter()


@router.post("/login", response_model=Token)
@limiter.limit("5/minute")
def login(request: Request, response: Response, login_request: LoginRequest, db: DbSession):
    """Authenticate a staff member; returns the token and sets auth cookies."""
    ip = client_ip(request)
    user = db.query(User).filter(User.email == login_request.email).first()

    if not user or not verify_password(login_request.password, user.password_hash):
        logger.warning(f"Failed login attempt for email: {login_request.email} from IP: {ip}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        logger.warning(f"Login attempt for inactive user: {login_request.email} (ID: {user.id}) from IP: {ip}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive",
        )

    logger.info(f"Successful login: {user.email} (ID: {user.id}, role: {user.role.value}) from IP: {ip}")
    token = create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": user.role.value, "full_name": user.name or ""}
    )
    response.set_cookie(
        COOKIE_ACCESS_NAME, token,
        max_age=ACCESS_TOKEN_MAX_AGE, httponly=True,
        secure=COOKIE_SECURE, samesite=COOKIE_SAMESITE,
    )
    response.set_cookie(
        COOKIE_CSRF_NAME, generate_csrf_token(),
        max_age=ACCESS_TOKEN_MAX_AGE, httponly=False,
        secure=COOKIE_SECURE, samesite=COOKIE_SAMESITE,
    )
    return Token(access_token=token)


@router.post("/logout")
@limiter.limit("30/minute")
def logout(request: Request, response: Response, current_user: CurrentUser):
    """Invalidate the current token and clear auth cookies."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        blacklist_token(auth_header.split(" ", 1)[1])
    cookie_token = request.cookies.get(COOKIE_ACCESS_NAME)
    if cookie_token:
        blacklist_token(cookie_token)
    response.delete_cookie(COOKIE_ACCESS_NAME)
    response.delete_cookie(COOKIE_CSRF_NAME)
    logger.info(f"User logged out: {current_user.email} (ID: {current_user.user_id})")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
@limiter.limit("60/minute")
def get_current_user_info(request: Request, current_user: CurrentUser, db: DbSession):
    """Get current authenticated user info."""
    user = db.query(User).filter(User.id == current_user.user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def register(request: Request, user_create: UserCreate, db: DbSession, current_user: RequireAdmin):
    """Create a staff account (admin only)."""
    if db.query(User).filter(User.email == user_create.email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = User(
        email=user_create.email,
        password_hash=get_password_hash(user_create.password),
        name=user_create.name,
        phone=user_create.phone,
        role=user_create.role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(
        f"User registered: {user.email} (ID: {user.id}, role: {user.role.value}) "
        f"by {current_user.email}"
    )
    return user
