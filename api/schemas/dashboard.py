"""Dashboard reporting schemas."""

from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel


class MetricValue(BaseModel):
    value: int
    change: float
    trend: Literal["up", "down", "stable"]


class DashboardStats(BaseModel):
    user_role: Optional[str] = None
    active_jobs: MetricValue
    applications_received: MetricValue
    client_companies: MetricValue
    total_candidates: MetricValue


class WeeklyApplications(BaseModel):
    week: str
    week_start: date
    applications: int
    companies: int
    roles: int


class TopPerformer(BaseModel):
    name: str
    value: int
    percentage: float


class CompleteDashboard(BaseModel):
    stats: DashboardStats
    chart_data: list[WeeklyApplications]
    top_jobs: list[TopPerformer]
    top_companies: list[TopPerformer]
    generated_at: datetime
