from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from jose import jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.config import settings
from michels_travel.database import get_db, utcnow
from michels_travel.dependencies import get_current_user, get_optional_user
from michels_travel.models.activity import NavigationHistory
from michels_travel.models.user import LoginAttempt, User
from michels_travel.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse

router = APIRouter()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

HISTORY_LIMIT = 200


def create_access_token(user_id: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {"sub": user_id, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post("/register", status_code=201, response_model=AuthResponse)
async def register(req: RegisterRequest, response: Response, db: AsyncSession = Depends(get_db)):
    email = req.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(
        open_id=f"email:{email}",
        name=req.name,
        email=email,
        password_hash=pwd_context.hash(req.password),
        login_method="email",
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same address
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    token = create_access_token(str(user.id))
    set_session_cookie(response, token)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(req: LoginRequest, request: Request, response: Response, db: AsyncSession = Depends(get_db)):
    email = req.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    attempt = LoginAttempt(
        user_id=user.id if user else None,
        email=email,
        ip_address=_client_ip(request),
        user_agent=(request.headers.get("user-agent") or "")[:500] or None,
    )
    db.add(attempt)

    if user and not user.password_hash:
        await db.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="This account signs in through OAuth. Please use the OAuth login.",
        )
    if not user or not pwd_context.verify(req.password, user.password_hash):
        await db.commit()
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        await db.commit()
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

    attempt.success = True
    user.last_signed_in = utcnow()
    await db.commit()

    token = create_access_token(str(user.id))
    set_session_cookie(response, token)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"success": True}


@router.get("/me", response_model=UserResponse | None)
async def me(user: User | None = Depends(get_optional_user)):
    return user


@router.get("/history")
async def navigation_history(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """The caller's most recent page visits."""
    result = await db.execute(
        select(NavigationHistory)
        .where(NavigationHistory.user_id == user.id)
        .order_by(NavigationHistory.created_at.desc())
        .limit(HISTORY_LIMIT)
    )
    return [
        {
            "id": str(h.id),
            "method": h.method,
            "path": h.path,
            "query": h.query,
            "created_at": h.created_at.isoformat() if h.created_at else None,
        }
        for h in result.scalars().all()
    ]
