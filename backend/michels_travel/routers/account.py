"""Account router — profile, saved traveler profiles, frequent flyer programs and search preferences."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.database import get_db
from michels_travel.dependencies import get_current_user
from michels_travel.models.account import FrequentFlyerProgram, TravelerProfile, UserPreference
from michels_travel.models.user import User
from michels_travel.schemas.account import (
    FrequentFlyerCreate,
    FrequentFlyerResponse,
    FrequentFlyerUpdate,
    PreferencesResponse,
    PreferencesUpdate,
    ProfileUpdate,
    TravelerCreate,
    TravelerResponse,
    TravelerUpdate,
)
from michels_travel.schemas.auth import UserResponse

router = APIRouter()


async def _clear_primary(db: AsyncSession, user_id: uuid.UUID, keep_id: uuid.UUID | None = None):
    """Only one traveler profile per user may be primary."""
    stmt = update(TravelerProfile).where(TravelerProfile.user_id == user_id, TravelerProfile.is_primary == True)
    if keep_id is not None:
        stmt = stmt.where(TravelerProfile.id != keep_id)
    await db.execute(stmt.values(is_primary=False).execution_options(synchronize_session="fetch"))


async def _get_traveler(db: AsyncSession, traveler_id: uuid.UUID, user_id: uuid.UUID) -> TravelerProfile:
    result = await db.execute(
        select(TravelerProfile).where(TravelerProfile.id == traveler_id, TravelerProfile.user_id == user_id)
    )
    traveler = result.scalar_one_or_none()
    if not traveler:
        raise HTTPException(status_code=404, detail="Traveler profile not found")
    return traveler


async def _get_program(db: AsyncSession, program_id: uuid.UUID, user_id: uuid.UUID) -> FrequentFlyerProgram:
    result = await db.execute(
        select(FrequentFlyerProgram).where(
            FrequentFlyerProgram.id == program_id, FrequentFlyerProgram.user_id == user_id
        )
    )
    program = result.scalar_one_or_none()
    if not program:
        raise HTTPException(status_code=404, detail="Frequent flyer program not found")
    return program


async def _get_preferences(db: AsyncSession, user_id: uuid.UUID) -> UserPreference | None:
    result = await db.execute(select(UserPreference).where(UserPreference.user_id == user_id))
    return result.scalar_one_or_none()


# ---- Profile ----


@router.get("/profile")
async def get_profile(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """User record together with travelers, programs and preferences."""
    travelers = await db.execute(
        select(TravelerProfile)
        .where(TravelerProfile.user_id == user.id)
        .order_by(TravelerProfile.is_primary.desc(), TravelerProfile.created_at)
    )
    programs = await db.execute(
        select(FrequentFlyerProgram)
        .where(FrequentFlyerProgram.user_id == user.id)
        .order_by(FrequentFlyerProgram.airline_code)
    )
    prefs = await _get_preferences(db, user.id)
    return {
        "user": UserResponse.model_validate(user),
        "notifications": {
            "email_notifications": user.email_notifications,
            "price_alert_notifications": user.price_alert_notifications,
            "marketing_emails": user.marketing_emails,
        },
        "travelers": [TravelerResponse.model_validate(t) for t in travelers.scalars().all()],
        "frequent_flyer_programs": [FrequentFlyerResponse.model_validate(p) for p in programs.scalars().all()],
        "preferences": PreferencesResponse.model_validate(prefs) if prefs else PreferencesResponse(),
    }


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    req: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    for field, value in req.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        if field == "preferred_currency":
            value = value.upper()
        setattr(user, field, value)
    await db.commit()
    return user


# ---- Traveler profiles ----


@router.get("/travelers", response_model=list[TravelerResponse])
async def list_travelers(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(
        select(TravelerProfile)
        .where(TravelerProfile.user_id == user.id)
        .order_by(TravelerProfile.is_primary.desc(), TravelerProfile.created_at)
    )
    return result.scalars().all()


@router.post("/travelers", status_code=201, response_model=TravelerResponse)
async def create_traveler(
    req: TravelerCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if req.is_primary:
        await _clear_primary(db, user.id)
    traveler = TravelerProfile(user_id=user.id, **req.model_dump())
    db.add(traveler)
    await db.commit()
    return traveler


@router.patch("/travelers/{traveler_id}", response_model=TravelerResponse)
async def update_traveler(
    traveler_id: uuid.UUID,
    req: TravelerUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    traveler = await _get_traveler(db, traveler_id, user.id)
    changes = req.model_dump(exclude_unset=True)
    if changes.get("is_primary"):
        await _clear_primary(db, user.id, keep_id=traveler.id)
    for field, value in changes.items():
        setattr(traveler, field, value)
    await db.commit()
    return traveler


@router.delete("/travelers/{traveler_id}")
async def delete_traveler(
    traveler_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    traveler = await _get_traveler(db, traveler_id, user.id)
    await db.delete(traveler)
    await db.commit()
    return {"success": True}


# ---- Frequent flyer programs ----


@router.get("/frequent-flyer", response_model=list[FrequentFlyerResponse])
async def list_programs(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(
        select(FrequentFlyerProgram)
        .where(FrequentFlyerProgram.user_id == user.id)
        .order_by(FrequentFlyerProgram.airline_code)
    )
    return result.scalars().all()


@router.post("/frequent-flyer", status_code=201, response_model=FrequentFlyerResponse)
async def create_program(
    req: FrequentFlyerCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if req.traveler_profile_id:
        await _get_traveler(db, req.traveler_profile_id, user.id)
    data = req.model_dump()
    data["airline_code"] = data["airline_code"].upper()
    program = FrequentFlyerProgram(user_id=user.id, **data)
    db.add(program)
    await db.commit()
    return program


@router.patch("/frequent-flyer/{program_id}", response_model=FrequentFlyerResponse)
async def update_program(
    program_id: uuid.UUID,
    req: FrequentFlyerUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    program = await _get_program(db, program_id, user.id)
    for field, value in req.model_dump(exclude_unset=True).items():
        setattr(program, field, value)
    await db.commit()
    return program


@router.delete("/frequent-flyer/{program_id}")
async def delete_program(
    program_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    program = await _get_program(db, program_id, user.id)
    await db.delete(program)
    await db.commit()
    return {"success": True}


# ---- Preferences ----


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    prefs = await _get_preferences(db, user.id)
    return prefs if prefs else PreferencesResponse()


@router.put("/preferences", response_model=PreferencesResponse)
async def upsert_preferences(
    req: PreferencesUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    prefs = await _get_preferences(db, user.id)
    if prefs is None:
        prefs = UserPreference(user_id=user.id)
        db.add(prefs)
    for field, value in req.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        if field in ("preferred_airlines", "avoided_airlines", "home_airports"):
            value = [code.upper() for code in value]
        setattr(prefs, field, value)
    await db.commit()
    return prefs
