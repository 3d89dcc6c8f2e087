"""Dashboard router — account overview for the signed-in user."""

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.database import get_db
from michels_travel.dependencies import get_current_user
from michels_travel.models.alerts import PriceAlert
from michels_travel.models.booking import Booking
from michels_travel.models.search import SavedRoute, UserSearchHistory
from michels_travel.models.user import User
from michels_travel.schemas.auth import UserResponse

router = APIRouter()


async def _count(db: AsyncSession, column, *conditions) -> int:
    result = await db.execute(select(func.count(column)).where(*conditions))
    return result.scalar() or 0


@router.get("")
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    recent = await db.execute(
        select(UserSearchHistory)
        .where(UserSearchHistory.user_id == user.id)
        .order_by(UserSearchHistory.searched_at.desc())
        .limit(5)
    )
    top = await db.execute(
        select(SavedRoute)
        .where(SavedRoute.user_id == user.id)
        .order_by(SavedRoute.search_count.desc())
        .limit(5)
    )

    return {
        "user": UserResponse.model_validate(user),
        "stats": {
            "total_searches": await _count(db, UserSearchHistory.id, UserSearchHistory.user_id == user.id),
            "saved_routes": await _count(db, SavedRoute.id, SavedRoute.user_id == user.id),
            "active_alerts": await _count(
                db, PriceAlert.id, PriceAlert.user_id == user.id, PriceAlert.is_active == True
            ),
            "total_bookings": await _count(db, Booking.id, Booking.user_id == user.id),
            "loyalty_points": user.loyalty_points,
            "loyalty_tier": user.loyalty_tier,
        },
        "recent_searches": [
            {
                "origin": h.origin,
                "origin_name": h.origin_name,
                "destination": h.destination,
                "destination_name": h.destination_name,
                "departure_date": h.departure_date,
                "return_date": h.return_date,
                "searched_at": h.searched_at.isoformat() if h.searched_at else None,
            }
            for h in recent.scalars().all()
        ],
        "top_routes": [
            {
                "id": str(r.id),
                "origin": r.origin,
                "destination": r.destination,
                "nickname": r.nickname,
                "search_count": r.search_count,
            }
            for r in top.scalars().all()
        ],
    }
