from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.database import get_db
from michels_travel.dependencies import get_optional_user
from michels_travel.models.user import User
from michels_travel.schemas.chat import ChatRequest, ChatResponse
from michels_travel.services.chat_assistant import chat_assistant

router = APIRouter()


@router.post("", response_model=ChatResponse)
async def chat(
    req: ChatRequest,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    return await chat_assistant.reply(
        db,
        session_id=req.session_id,
        message=req.message,
        language=req.language,
        user_age=req.user_age,
        user_id=user.id if user else None,
    )


@router.get("/{session_id}/history")
async def chat_history(session_id: str, db: AsyncSession = Depends(get_db)):
    return {"session_id": session_id, "messages": await chat_assistant.get_history(db, session_id)}
