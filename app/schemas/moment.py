# 모먼트 API 요청/응답 스키마

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.moment import CAPTION_MAX_LENGTH


class MomentCreate(BaseModel):
    """모먼트 생성 요청."""

    caption: str = Field(..., min_length=1, max_length=CAPTION_MAX_LENGTH)
    media_ref: str = Field(..., min_length=1, max_length=500)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    @field_validator("caption", "media_ref", mode="before")
    @classmethod
    def strip_text(cls, v):
        # 길이 제한은 앞뒤 공백을 뺀 값 기준 (서비스와 동일)
        return v.strip() if isinstance(v, str) else v


class MomentResponse(BaseModel):
    """모먼트 응답. distance_m 은 nearby 에서만 의미 있음 (기준점 없는 단건 조회는 None)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: str
    caption: str
    media_ref: str
    lat: float
    lng: float
    created_at: datetime
    expires_at: datetime
    distance_m: Optional[float] = None


class NearbyMomentsResponse(BaseModel):
    """GET /moments/nearby 응답. total/pages 는 만료 제외 후 기준."""

    moments: List[MomentResponse]
    total: int
    page: int
    pages: int


class MessageResponse(BaseModel):
    message: str
