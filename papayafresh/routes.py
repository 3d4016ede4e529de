"""
HTTP routes for the PapayaFresh API.

Every handler converts failures into the JSON error body the mobile app
expects instead of FastAPI's default `{"detail": ...}`.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from papayafresh.config import Settings, get_settings
from papayafresh.dashboard import DashboardAggregator
from papayafresh.dependencies import (
    get_dashboard_aggregator,
    get_document_store,
    get_scan_recorder,
    get_user_eraser,
)
from papayafresh.eraser import UserEraser
from papayafresh.errors import NotFoundError, PapayaFreshError
from papayafresh.scans import ScanRecorder
from papayafresh.schemas import (
    DashboardErrorResponse,
    DashboardStatsResponse,
    DeleteUserResponse,
    ErrorResponse,
    HealthResponse,
    HistoryResponse,
    ListUsersResponse,
    ScanRequest,
    ScanResponse,
    ShelfResponse,
)
from papayafresh.store import HISTORY_SUBCOLLECTION, SHELF_SUBCOLLECTION, DocumentStore
from papayafresh.timestamps import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {500: {"model": ErrorResponse}}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def _error_for(e: Exception) -> JSONResponse:
    status_code = e.status_code if isinstance(e, PapayaFreshError) else 500
    return _error(status_code, str(e))


@router.get("/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(
        status="OK",
        timestamp=utc_now(),
        server=settings.server_name,
        version=settings.version,
    )


@router.get("/users/all", response_model=ListUsersResponse, responses=ERROR_RESPONSES)
def list_users(aggregator: DashboardAggregator = Depends(get_dashboard_aggregator)):
    try:
        users = aggregator.list_users()
        return ListUsersResponse(totalUsers=len(users), users=users)
    except Exception as e:
        logger.exception("Error fetching users data")
        return _error_for(e)


@router.get(
    "/dashboard/stats",
    response_model=DashboardStatsResponse,
    responses={500: {"model": DashboardErrorResponse}},
)
def dashboard_stats(
    aggregator: DashboardAggregator = Depends(get_dashboard_aggregator),
):
    try:
        summary = aggregator.summarize()
    except Exception as e:
        logger.exception("Dashboard error")
        return JSONResponse(
            status_code=500,
            content=DashboardErrorResponse(
                error="Failed to load dashboard stats", message=str(e)
            ).model_dump(),
        )
    return summary.as_dict()


@router.delete(
    "/users/delete/{user_id}",
    response_model=DeleteUserResponse,
    responses={404: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
def delete_user(user_id: str, eraser: UserEraser = Depends(get_user_eraser)):
    try:
        result = eraser.erase(user_id)
    except NotFoundError as e:
        return _error_for(e)
    except Exception as e:
        logger.exception("Error deleting user %s", user_id)
        return _error_for(e)
    return DeleteUserResponse(
        message="User deleted successfully",
        deletedUser=result.user_id,
        deletedRecords=result.as_dict(),
    )


@router.get(
    "/users/{user_id}/shelf", response_model=ShelfResponse, responses=ERROR_RESPONSES
)
def user_shelf(user_id: str, store: DocumentStore = Depends(get_document_store)):
    try:
        records = store.list_user_records(user_id, SHELF_SUBCOLLECTION)
        return ShelfResponse(
            userId=user_id,
            shelfCount=len(records),
            shelf=[record.as_json() for record in records],
        )
    except Exception as e:
        logger.exception("Error fetching shelf for %s", user_id)
        return _error_for(e)


@router.get(
    "/users/{user_id}/history",
    response_model=HistoryResponse,
    responses=ERROR_RESPONSES,
)
def user_history(user_id: str, store: DocumentStore = Depends(get_document_store)):
    try:
        records = store.list_user_records(user_id, HISTORY_SUBCOLLECTION)
        return HistoryResponse(
            userId=user_id,
            historyCount=len(records),
            history=[record.as_json() for record in records],
        )
    except Exception as e:
        logger.exception("Error fetching history for %s", user_id)
        return _error_for(e)


@router.post("/scan", response_model=ScanResponse, responses=ERROR_RESPONSES)
def record_scan(
    payload: ScanRequest, recorder: ScanRecorder = Depends(get_scan_recorder)
):
    scan = payload.model_dump(exclude_none=True, exclude={"userId"})
    try:
        recorded = recorder.record(payload.userId, scan)
    except Exception as e:
        logger.exception("Error recording scan for %s", payload.userId)
        return _error_for(e)
    return ScanResponse(
        shelfId=recorded.shelf_id,
        historyId=recorded.history_id,
        globalScanId=recorded.global_scan_id,
    )
