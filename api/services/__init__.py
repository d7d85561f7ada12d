"""
API Services Layer.

Database operations behind the API endpoints. Every function receives the
request's ``AsyncSession``; the selectors in ``candidate_views`` and the
dashboard helpers are pure.
"""

from api.services.users import (
    register_user,
    authenticate_user,
    get_complete_user_data,
    update_profile,
    change_password,
    get_notification_preferences,
    update_notification_preferences,
)

from api.services.jobs import (
    list_jobs,
    get_job,
    create_job,
    update_job,
    delete_job,
)

from api.services.access_control import (
    check_job_access,
    check_job_access_in_organization,
    get_accessible_job_ids,
    list_job_access,
    set_job_access,
)

from api.services.applications import (
    fetch_applications_with_access,
    get_application,
    update_application_status,
)

from api.services.candidate_views import (
    filter_candidates,
    sort_candidates,
    paginate,
    calculate_stats,
    build_listing,
)

from api.services.organizations import (
    get_organization,
    list_roles,
    fetch_org_members,
    select_active_members,
    select_members_by_role,
    assign_user_role,
)

from api.services.dashboard import (
    get_dashboard_stats,
    get_applications_over_time,
    get_top_performers,
    get_complete_dashboard_data,
)

__all__ = [
    # Accounts
    "register_user",
    "authenticate_user",
    "get_complete_user_data",
    "update_profile",
    "change_password",
    "get_notification_preferences",
    "update_notification_preferences",
    # Jobs
    "list_jobs",
    "get_job",
    "create_job",
    "update_job",
    "delete_job",
    # Access control
    "check_job_access",
    "check_job_access_in_organization",
    "get_accessible_job_ids",
    "list_job_access",
    "set_job_access",
    # Applications
    "fetch_applications_with_access",
    "get_application",
    "update_application_status",
    "filter_candidates",
    "sort_candidates",
    "paginate",
    "calculate_stats",
    "build_listing",
    # Organization
    "get_organization",
    "list_roles",
    "fetch_org_members",
    "select_active_members",
    "select_members_by_role",
    "assign_user_role",
    # Dashboard
    "get_dashboard_stats",
    "get_applications_over_time",
    "get_top_performers",
    "get_complete_dashboard_data",
]
