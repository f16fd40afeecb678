# 사용자 위치/클러스터 스키마

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LocationUpdate(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class LocationAck(BaseModel):
    """위치 갱신 응답."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    lat: float
    lng: float
    updated_at: datetime


class CentroidOut(BaseModel):
    lat: float
    lng: float


class ClusterOut(BaseModel):
    """격자 셀 하나. 개별 위치 대신 셀 평균 좌표만 노출."""

    grid_cell_id: str
    count: int
    centroid: CentroidOut
    distance_m: float  # 셀 구성원의 평균 거리 (소수 둘째 자리)
