from typing import Literal

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    session_id: str = Field(min_length=1, max_length=64)
    message: str = Field(min_length=1, max_length=4000)
    language: Literal["en", "pt", "es"] = "en"
    user_age: int | None = Field(default=None, ge=0, le=150)


class AgentAction(BaseModel):
    type: Literal["scroll", "click", "fill", "navigate", "highlight"]
    target: str
    value: str | None = None
    description: str = ""


class NeedsUserInput(BaseModel):
    field: str
    question: str


class ChatResponse(BaseModel):
    session_id: str
    message: str
    actions: list[AgentAction] = []
    user_age: int | None = None
    is_elderly: bool = False
    needs_user_input: NeedsUserInput | None = None
