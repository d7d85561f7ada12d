"""
Dashboard reporting.

Figures are computed for the caller's organization; TA-only callers only
see the jobs they were granted (and the applications to those jobs).
"""

from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.services.access_control import get_accessible_job_ids
from core.middleware.authorization import UserContext
from core.utils.datetime import days_ago, ensure_aware, now, start_of_day, start_of_week
from database.models.applications import JobApplication
from database.models.jobs import Job, JobStatus

logger = logging.getLogger(__name__)

COMPARISON_WINDOW_DAYS = 30

# Applications grouped by job, company name or job title
TOP_PERFORMER_METRICS = ("applications", "companies", "roles")


# ==================== Pure helpers ===================== #

def compute_metric(value: int, recent: int, previous: int) -> Dict[str, Any]:
    """
    Metric with its change between the last window and the one before.

    ``change`` is a percentage rounded to one decimal: 100 when growing from
    zero, 0 when both windows are empty.
    """
    if previous:
        change = round((recent - previous) / previous * 100, 1)
    else:
        change = 100.0 if recent else 0.0

    if change > 0:
        trend = "up"
    elif change < 0:
        trend = "down"
    else:
        trend = "stable"

    return {"value": value, "change": change, "trend": trend}


def week_label(week_start: date) -> str:
    """ISO week label such as ``2024-W07``."""
    year, week, _ = week_start.isocalendar()
    return f"{year}-W{week:02d}"


def first_week_start(reference: datetime, weeks_back: int) -> date:
    return start_of_week(reference) - timedelta(weeks=weeks_back - 1)


def bucket_by_week(
    rows: Iterable[Tuple[datetime, str, str]],
    weeks_back: int = 12,
    reference: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Group ``(applied_date, company_name, job_title)`` rows into ISO weeks.

    Returns ``weeks_back`` buckets ending with the current week, oldest first,
    with empty weeks reported as zeros.
    """
    if weeks_back < 1:
        raise ValueError("weeks_back must be at least 1")

    reference = reference or now()
    first = first_week_start(reference, weeks_back)
    buckets = {
        first + timedelta(weeks=i): {"applications": 0, "companies": set(), "roles": set()}
        for i in range(weeks_back)
    }

    for applied_date, company_name, job_title in rows:
        bucket = buckets.get(start_of_week(ensure_aware(applied_date)))
        if bucket is None:
            continue
        bucket["applications"] += 1
        bucket["companies"].add(company_name)
        bucket["roles"].add(job_title)

    return [
        {
            "week": week_label(week_start),
            "week_start": week_start,
            "applications": bucket["applications"],
            "companies": len(bucket["companies"]),
            "roles": len(bucket["roles"]),
        }
        for week_start, bucket in sorted(buckets.items())
    ]


def rank_top(rows: Iterable[Tuple[str, int]], limit: int = 10) -> List[Dict[str, Any]]:
    """
    Highest counts first; ``percentage`` is each count's share of all rows.
    """
    rows = [(name, int(value)) for name, value in rows]
    total = sum(value for _, value in rows)
    ranked = sorted(rows, key=lambda row: row[1], reverse=True)[:limit]
    return [
        {
            "name": name,
            "value": value,
            "percentage": round(value / total * 100, 1) if total else 0.0,
        }
        for name, value in ranked
    ]


# ==================== Queries ===================== #

async def _job_scope(session: AsyncSession, context: UserContext) -> list:
    """WHERE clauses restricting jobs to what the caller may see."""
    conditions = [Job.organization_id == context.require_organization()]
    if context.is_ta_only:
        conditions.append(Job.id.in_(await get_accessible_job_ids(session, context)))
    return conditions


async def _scalar(session: AsyncSession, statement) -> int:
    result = await session.execute(statement)
    return result.scalar() or 0


async def get_dashboard_stats(
    session: AsyncSession,
    context: UserContext,
    reference: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Headline figures with their 30-day trend."""
    scope = await _job_scope(session, context)
    reference = reference or now()
    window_end = reference
    window_start = days_ago(reference, COMPARISON_WINDOW_DAYS)
    previous_start = days_ago(reference, COMPARISON_WINDOW_DAYS * 2)

    def jobs_created(start, end):
        return (Job.created_at >= start, Job.created_at < end)

    def applied(start, end):
        return (JobApplication.applied_date >= start, JobApplication.applied_date < end)

    jobs = select(func.count(Job.id)).where(*scope)
    active_jobs = jobs.where(Job.status == JobStatus.ACTIVE)
    companies = select(func.count(distinct(Job.company_name))).where(*scope)
    applications = (
        select(func.count(JobApplication.id))
        .select_from(JobApplication)
        .join(Job, JobApplication.job_id == Job.id)
        .where(*scope)
    )
    candidates = (
        select(func.count(distinct(JobApplication.profile_id)))
        .select_from(JobApplication)
        .join(Job, JobApplication.job_id == Job.id)
        .where(*scope)
    )

    stats = {
        "user_role": context.primary_role.value if context.primary_role else None,
        "active_jobs": compute_metric(
            await _scalar(session, active_jobs),
            await _scalar(session, active_jobs.where(*jobs_created(window_start, window_end))),
            await _scalar(session, active_jobs.where(*jobs_created(previous_start, window_start))),
        ),
        "applications_received": compute_metric(
            await _scalar(session, applications),
            await _scalar(session, applications.where(*applied(window_start, window_end))),
            await _scalar(session, applications.where(*applied(previous_start, window_start))),
        ),
        "client_companies": compute_metric(
            await _scalar(session, companies),
            await _scalar(session, companies.where(*jobs_created(window_start, window_end))),
            await _scalar(session, companies.where(*jobs_created(previous_start, window_start))),
        ),
        "total_candidates": compute_metric(
            await _scalar(session, candidates),
            await _scalar(session, candidates.where(*applied(window_start, window_end))),
            await _scalar(session, candidates.where(*applied(previous_start, window_start))),
        ),
    }
    return stats


async def get_applications_over_time(
    session: AsyncSession,
    context: UserContext,
    weeks_back: int = 12,
    reference: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Weekly application, company and role counts, oldest week first."""
    if weeks_back < 1:
        raise ValueError("weeks_back must be at least 1")

    scope = await _job_scope(session, context)
    reference = reference or now()
    since = start_of_day(first_week_start(reference, weeks_back))

    result = await session.execute(
        select(JobApplication.applied_date, Job.company_name, Job.job_title)
        .join(Job, JobApplication.job_id == Job.id)
        .where(*scope, JobApplication.applied_date >= since)
    )
    return bucket_by_week(result.all(), weeks_back, reference)


async def get_top_performers(
    session: AsyncSession,
    context: UserContext,
    metric_type: str,
    limit: int = 10,
) -> List[Dict[str, Any]]:
    """
    Rank jobs, companies or job titles by number of applications.

    Raises:
        ValueError: Unknown ``metric_type``
    """
    if metric_type not in TOP_PERFORMER_METRICS:
        raise ValueError(
            f"Invalid metric type: {metric_type}. Must be one of: {', '.join(TOP_PERFORMER_METRICS)}"
        )

    scope = await _job_scope(session, context)
    count = func.count(JobApplication.id)

    if metric_type == "applications":
        statement = (
            select(Job.job_title, count)
            .select_from(Job)
            .join(JobApplication, JobApplication.job_id == Job.id)
            .group_by(Job.id, Job.job_title)
        )
    elif metric_type == "companies":
        statement = (
            select(Job.company_name, count)
            .select_from(Job)
            .join(JobApplication, JobApplication.job_id == Job.id)
            .group_by(Job.company_name)
        )
    else:
        statement = (
            select(Job.job_title, count)
            .select_from(Job)
            .join(JobApplication, JobApplication.job_id == Job.id)
            .group_by(Job.job_title)
        )

    result = await session.execute(statement.where(*scope))
    return rank_top(result.all(), limit)


async def get_complete_dashboard_data(session: AsyncSession, context: UserContext) -> Dict[str, Any]:
    """Stats, 12-week chart and top five jobs and companies in one payload."""
    reference = now()
    data = {
        "stats": await get_dashboard_stats(session, context, reference),
        "chart_data": await get_applications_over_time(session, context, 12, reference),
        "top_jobs": await get_top_performers(session, context, "applications", 5),
        "top_companies": await get_top_performers(session, context, "companies", 5),
        "generated_at": reference,
    }
    logger.info(f"Dashboard generated for user {context.user_id}")
    return data
