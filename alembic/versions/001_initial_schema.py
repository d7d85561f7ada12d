"""Initial schema: organizations, staff, jobs, candidates and applications

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

# Enum columns hold member names (SQLEnum with native_enum=False)
ENUM = sa.String(length=50)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create tables and seed the role catalogue."""
    op.create_table(
        'organizations',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug', name='uq_organizations_slug'),
    )
    op.create_index('idx_organization_slug', 'organizations', ['slug'])

    roles = op.create_table(
        'roles',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('name', ENUM, nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('permissions', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_roles_name'),
    )

    op.create_table(
        'user_profiles',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('organization_id', sa.BigInteger(), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('avatar_url', sa.String(length=1024), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('notification_preferences', sa.JSON(), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_user_profiles_email', 'user_profiles', ['email'], unique=True)
    op.create_index('ix_user_profiles_organization_id', 'user_profiles', ['organization_id'])

    op.create_table(
        'user_roles',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('user_id', sa.BigInteger(), nullable=False),
        sa.Column('role_id', sa.BigInteger(), nullable=False),
        sa.Column('organization_id', sa.BigInteger(), nullable=False),
        sa.Column('assigned_by', sa.BigInteger(), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user_profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id']),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['assigned_by'], ['user_profiles.id'], ondelete='SET NULL'),
    )
    op.create_index('idx_user_roles_user_org', 'user_roles', ['user_id', 'organization_id', 'is_active'])

    op.create_table(
        'jobs',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('organization_id', sa.BigInteger(), nullable=False),
        sa.Column('created_by', sa.BigInteger(), nullable=True),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('company_logo_url', sa.String(length=1024), nullable=True),
        sa.Column('job_title', sa.String(length=255), nullable=False),
        sa.Column('job_type', ENUM, nullable=False),
        sa.Column('job_location_type', ENUM, nullable=False),
        sa.Column('job_location', sa.String(length=255), nullable=False),
        sa.Column('working_type', ENUM, nullable=False),
        sa.Column('min_experience_needed', sa.Integer(), nullable=False),
        sa.Column('max_experience_needed', sa.Integer(), nullable=False),
        sa.Column('min_salary', sa.Float(), nullable=False),
        sa.Column('max_salary', sa.Float(), nullable=False),
        sa.Column('job_description', sa.Text(), nullable=False),
        sa.Column('requirements', sa.JSON(), nullable=True),
        sa.Column('benefits', sa.JSON(), nullable=True),
        sa.Column('application_deadline', sa.Date(), nullable=True),
        sa.Column('status', ENUM, nullable=False, server_default='ACTIVE'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], ['user_profiles.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_jobs_organization_id', 'jobs', ['organization_id'])
    op.create_index('idx_job_org_status', 'jobs', ['organization_id', 'status'])
    op.create_index('idx_job_org_created', 'jobs', ['organization_id', 'created_at'])

    op.create_table(
        'job_access_control',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('job_id', sa.BigInteger(), nullable=False),
        sa.Column('user_id', sa.BigInteger(), nullable=False),
        sa.Column('access_type', ENUM, nullable=False, server_default='GRANTED'),
        sa.Column('granted_by', sa.BigInteger(), nullable=True),
        sa.Column('granted_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['user_profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['granted_by'], ['user_profiles.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('job_id', 'user_id', name='uq_job_access_job_user'),
    )
    op.create_index('idx_job_access_user_type', 'job_access_control', ['user_id', 'access_type'])

    op.create_table(
        'candidate_profiles',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('auth_id', sa.String(length=100), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('candidate_email', sa.String(length=255), nullable=False),
        sa.Column('mobile_number', sa.String(length=30), nullable=True),
        sa.Column('address', sa.String(length=512), nullable=True),
        sa.Column('gender', sa.String(length=30), nullable=True),
        sa.Column('disability', sa.Boolean(), nullable=True),
        sa.Column('resume_link', sa.String(length=1024), nullable=True),
        sa.Column('portfolio_url', sa.String(length=1024), nullable=True),
        sa.Column('linkedin_url', sa.String(length=1024), nullable=True),
        sa.Column('additional_doc_link', sa.String(length=1024), nullable=True),
        sa.Column('current_ctc', sa.Float(), nullable=True),
        sa.Column('expected_ctc', sa.Float(), nullable=True),
        sa.Column('notice_period', sa.String(length=50), nullable=True),
        sa.Column('dob', sa.Date(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_candidate_profiles_auth_id', 'candidate_profiles', ['auth_id'])
    op.create_index('ix_candidate_profiles_candidate_email', 'candidate_profiles', ['candidate_email'])

    op.create_table(
        'education',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('profile_id', sa.BigInteger(), nullable=False),
        sa.Column('college_university', sa.String(length=255), nullable=False),
        sa.Column('degree', sa.String(length=255), nullable=True),
        sa.Column('field_of_study', sa.String(length=255), nullable=True),
        sa.Column('grade_percentage', sa.Float(), nullable=True),
        sa.Column('is_current', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['profile_id'], ['candidate_profiles.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_education_profile_id', 'education', ['profile_id'])

    op.create_table(
        'experience',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('profile_id', sa.BigInteger(), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('job_title', sa.String(length=255), nullable=False),
        sa.Column('job_type', sa.String(length=50), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('currently_working', sa.Boolean(), nullable=False, server_default='false'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['profile_id'], ['candidate_profiles.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_experience_profile_id', 'experience', ['profile_id'])

    op.create_table(
        'job_applications',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('job_id', sa.BigInteger(), nullable=False),
        sa.Column('profile_id', sa.BigInteger(), nullable=False),
        sa.Column('application_status', ENUM, nullable=False, server_default='PENDING'),
        sa.Column('applied_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['profile_id'], ['candidate_profiles.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('job_id', 'profile_id', name='uq_application_job_profile'),
    )
    op.create_index('idx_application_job_status', 'job_applications', ['job_id', 'application_status'])
    op.create_index('idx_application_applied_date', 'job_applications', ['applied_date'])

    op.bulk_insert(roles, [
        {
            'name': 'ADMIN',
            'display_name': 'Admin',
            'description': 'Manages members and roles; full access to jobs and applications',
            'permissions': {'members': True, 'jobs': 'all', 'applications': 'all'},
        },
        {
            'name': 'HR',
            'display_name': 'HR',
            'description': 'Full access to jobs and applications',
            'permissions': {'members': False, 'jobs': 'all', 'applications': 'all'},
        },
        {
            'name': 'TA',
            'display_name': 'Talent Acquisition',
            'description': 'Reviews applications for the jobs it has been granted',
            'permissions': {'members': False, 'jobs': 'granted', 'applications': 'granted'},
        },
    ])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('job_applications')
    op.drop_table('experience')
    op.drop_table('education')
    op.drop_table('candidate_profiles')
    op.drop_table('job_access_control')
    op.drop_table('jobs')
    op.drop_table('user_roles')
    op.drop_table('user_profiles')
    op.drop_table('roles')
    op.drop_table('organizations')
