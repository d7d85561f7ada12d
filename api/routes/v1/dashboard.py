"""Dashboard reporting endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import UserContext, get_db, require_permission
from api.schemas.dashboard import (
    CompleteDashboard,
    DashboardStats,
    TopPerformer,
    WeeklyApplications,
)
from api.services import dashboard as dashboard_service
from core.middleware.authorization import Permission

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

require_dashboard = require_permission(Permission.DASHBOARD_VIEW)


@router.get(
    "",
    response_model=CompleteDashboard,
    summary="Complete Dashboard",
    description="Stats, weekly chart and top jobs and companies in one call.",
)
async def get_dashboard(
    context: UserContext = Depends(require_dashboard),
    db: AsyncSession = Depends(get_db),
):
    return await dashboard_service.get_complete_dashboard_data(db, context)


@router.get(
    "/stats",
    response_model=DashboardStats,
    summary="Dashboard Stats",
    description="Headline figures with their change over the last 30 days.",
)
async def get_stats(
    context: UserContext = Depends(require_dashboard),
    db: AsyncSession = Depends(get_db),
):
    return await dashboard_service.get_dashboard_stats(db, context)


@router.get(
    "/applications-over-time",
    response_model=list[WeeklyApplications],
    summary="Applications Over Time",
    description="Weekly counts for the last weeks, oldest first.",
)
async def get_applications_over_time(
    weeks_back: int = Query(12, ge=1, le=52),
    context: UserContext = Depends(require_dashboard),
    db: AsyncSession = Depends(get_db),
):
    return await dashboard_service.get_applications_over_time(db, context, weeks_back)


@router.get(
    "/top-performers",
    response_model=list[TopPerformer],
    summary="Top Performers",
    description="Jobs (applications), companies or job titles (roles) ranked by applications.",
)
async def get_top_performers(
    metric_type: str = Query("applications", description="applications, companies or roles"),
    limit: int = Query(10, ge=1, le=50),
    context: UserContext = Depends(require_dashboard),
    db: AsyncSession = Depends(get_db),
):
    return await dashboard_service.get_top_performers(db, context, metric_type, limit)
