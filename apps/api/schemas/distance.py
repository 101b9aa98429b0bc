from typing import List, Optional

from pydantic import BaseModel, Field


class DistanceRequest(BaseModel):
    """Coordinates are checked by the distance module, not by field bounds, so (0, 0) and
    out-of-range values get the same 400 message as everywhere else."""
    user_latitude: Optional[float] = None
    user_longitude: Optional[float] = None
    shop_id: int


class BatchDistanceRequest(BaseModel):
    user_latitude: Optional[float] = None
    user_longitude: Optional[float] = None
    shop_ids: List[int] = Field(default_factory=list)


class DistanceResult(BaseModel):
    shop_id: int
    shop_name: Optional[str] = None
    distance_km: Optional[float] = None
    formatted: str
    error: Optional[str] = None


class BatchDistanceResponse(BaseModel):
    distances: List[DistanceResult]
