"""
Pure selectors over fetched candidate views.

The applications endpoint fetches a bounded set of applications and then
filters, sorts and pages it in memory with these functions. None of them
touch the database.
"""

from datetime import datetime
from math import ceil
from typing import Iterable, List, Optional, Tuple

from api.schemas.applications import (
    ALL_STATUSES,
    ApplicationStats,
    CandidateFilters,
    CandidateView,
    PaginationState,
    SortOption,
)
from core.middleware.authorization import UserContext
from core.utils.datetime import days_ago, ensure_aware, now, start_of_day
from database.models.applications import ApplicationStatus


def _contains(value: Optional[str], needle: str) -> bool:
    return needle.lower() in (value or "").lower()


def matches_filters(
    candidate: CandidateView,
    filters: CandidateFilters,
    context: Optional[UserContext] = None,
) -> bool:
    if context is not None and context.is_ta_only and not candidate.has_access:
        return False

    if filters.status and filters.status != ALL_STATUSES:
        if candidate.application_status.value != filters.status.lower():
            return False

    if filters.location:
        if not (_contains(candidate.address, filters.location)
                or _contains(candidate.job_location, filters.location)):
            return False

    if filters.job_title and not _contains(candidate.job_title, filters.job_title):
        return False

    if filters.company and not _contains(candidate.company_name, filters.company):
        return False

    # Salary bounds only apply to candidates who stated an expectation
    if candidate.expected_ctc:
        if filters.salary_min is not None and candidate.expected_ctc < filters.salary_min:
            return False
        if filters.salary_max is not None and candidate.expected_ctc > filters.salary_max:
            return False

    applied_on = candidate.applied_date.date()
    if filters.date_from and applied_on < filters.date_from:
        return False
    if filters.date_to and applied_on > filters.date_to:
        return False

    if filters.gender and candidate.gender != filters.gender:
        return False

    if filters.disability is not None and candidate.disability != filters.disability:
        return False

    return True


def filter_candidates(
    candidates: Iterable[CandidateView],
    filters: CandidateFilters,
    context: Optional[UserContext] = None,
) -> List[CandidateView]:
    """Candidates matching every active filter, in their original order."""
    return [c for c in candidates if matches_filters(c, filters, context)]


def sort_candidates(
    candidates: Iterable[CandidateView],
    sort_by: Optional[SortOption] = None,
) -> List[CandidateView]:
    """
    Stable sort by name, applied date or expected salary.

    Defaults to newest applications first; a missing expected salary sorts
    as 0.
    """
    sort_by = SortOption(sort_by) if sort_by else SortOption.DATE_DESC

    if sort_by in (SortOption.NAME_ASC, SortOption.NAME_DESC):
        key = lambda c: c.name.casefold()  # noqa: E731
    elif sort_by in (SortOption.SALARY_ASC, SortOption.SALARY_DESC):
        key = lambda c: c.expected_ctc or 0  # noqa: E731
    else:
        key = lambda c: ensure_aware(c.applied_date)  # noqa: E731

    descending = sort_by in (SortOption.NAME_DESC, SortOption.DATE_DESC, SortOption.SALARY_DESC)
    return sorted(candidates, key=key, reverse=descending)


def paginate(items: List, page: int = 1, per_page: int = 20) -> Tuple[List, PaginationState]:
    """Slice ``items`` for ``page`` and describe where that page sits."""
    if page < 1:
        raise ValueError("Page must be at least 1")
    if per_page < 1:
        raise ValueError("Items per page must be at least 1")

    total_items = len(items)
    total_pages = ceil(total_items / per_page)
    start = (page - 1) * per_page

    return items[start:start + per_page], PaginationState(
        current_page=page,
        per_page=per_page,
        total_items=total_items,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )


def calculate_stats(
    candidates: Iterable[CandidateView],
    reference: Optional[datetime] = None,
) -> ApplicationStats:
    """
    Status counts plus applications received today, within the last 7 days
    and within the last 30 days (windows start at midnight UTC).
    """
    reference = reference or now()
    today = start_of_day(reference)
    week_start = days_ago(reference, 7)
    month_start = days_ago(reference, 30)

    stats = ApplicationStats()
    for candidate in candidates:
        stats.total += 1
        if candidate.application_status == ApplicationStatus.PENDING:
            stats.pending += 1
        elif candidate.application_status == ApplicationStatus.ACCEPTED:
            stats.accepted += 1
        elif candidate.application_status == ApplicationStatus.REJECTED:
            stats.rejected += 1

        applied = ensure_aware(candidate.applied_date)
        if applied >= today:
            stats.today += 1
        if applied >= week_start:
            stats.this_week += 1
        if applied >= month_start:
            stats.this_month += 1

    return stats


def build_listing(
    candidates: List[CandidateView],
    filters: CandidateFilters,
    sort_by: Optional[SortOption] = None,
    page: int = 1,
    per_page: int = 20,
    context: Optional[UserContext] = None,
    reference: Optional[datetime] = None,
) -> dict:
    """
    Filter, sort and page a fetched candidate set.

    Stats describe the whole fetched set, not just the filtered page.
    """
    selected = sort_candidates(filter_candidates(candidates, filters, context), sort_by)
    page_items, pagination = paginate(selected, page, per_page)
    return {
        "candidates": page_items,
        "pagination": pagination,
        "stats": calculate_stats(candidates, reference),
    }
