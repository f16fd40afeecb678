# 매치 API 요청/응답 스키마

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.match import MESSAGE_MAX_LENGTH

MatchStatusLiteral = Literal["pending", "accepted", "rejected"]


class MatchCreate(BaseModel):
    """모먼트 참여 요청. message 는 선택."""

    moment_id: int = Field(..., ge=1)
    message: Optional[str] = Field(default=None, max_length=MESSAGE_MAX_LENGTH)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v):
        # 공백만 있으면 메시지 없음으로 취급
        if isinstance(v, str):
            return v.strip() or None
        return v


class MatchStatusUpdate(BaseModel):
    """상태 변경 요청. pending 은 스키마상 허용하되 서비스에서 409로 거절."""

    status: MatchStatusLiteral


class MatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    requester_id: str
    owner_id: str
    moment_id: int
    status: MatchStatusLiteral
    message: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MatchListResponse(BaseModel):
    """GET /matches 응답."""

    matches: List[MatchResponse]
    total: int
    page: int
    pages: int
