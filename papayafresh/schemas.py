"""
Pydantic schemas for the PapayaFresh API.

Field names are camelCase because the mobile app reads them as-is.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class RootResponse(BaseModel):
    message: str
    status: Literal["OK"]
    timestamp: datetime


class HealthResponse(BaseModel):
    status: Literal["OK"]
    timestamp: datetime
    server: str
    version: str


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str


class DashboardErrorResponse(BaseModel):
    error: str
    message: str


class UserSummary(BaseModel):
    userId: str
    email: str
    user_id: str
    created_at: Any
    shelfCount: int
    historyCount: int
    totalScans: int


class ListUsersResponse(BaseModel):
    success: Literal[True] = True
    totalUsers: int
    users: list[UserSummary]


class RipenessDistribution(BaseModel):
    unripe: int
    ripe: int
    overripe: int


class ActivityItem(BaseModel):
    user: str
    action: str
    time: str


class UserStats(BaseModel):
    averageScansPerUser: float
    activeUsers: int
    totalShelfItems: int
    totalHistoryItems: int


class DashboardStatsResponse(BaseModel):
    totalUsers: int
    totalScans: int
    papayasOnShelf: int
    ripenessDistribution: RipenessDistribution
    weeklyScans: list[int] = Field(..., min_length=4, max_length=4)
    recentActivity: list[ActivityItem]
    userStats: UserStats


class DeletedRecords(BaseModel):
    shelf: int
    history: int
    auth: bool


class DeleteUserResponse(BaseModel):
    success: Literal[True] = True
    message: str
    deletedUser: str
    deletedRecords: DeletedRecords


class ShelfResponse(BaseModel):
    success: Literal[True] = True
    userId: str
    shelfCount: int
    shelf: list[dict]


class HistoryResponse(BaseModel):
    success: Literal[True] = True
    userId: str
    historyCount: int
    history: list[dict]


class ScanRequest(BaseModel):
    """A scan posted by the app; fields beyond the named ones are stored as-is."""

    model_config = ConfigDict(extra="allow")

    userId: str = Field(..., min_length=1, max_length=128)
    ripeness: Optional[str] = None
    variety: Optional[str] = None
    confidence: Optional[float] = None
    imageUrl: Optional[str] = None


class ScanResponse(BaseModel):
    success: Literal[True] = True
    shelfId: str
    historyId: str
    globalScanId: str
