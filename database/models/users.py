from typing import Any, TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    BigInteger,
    DateTime,
    func,
    JSON,
)
from database.engine import Base
from database.security import audit_changes
from datetime import datetime

if TYPE_CHECKING:
    from database.models.organizations import Organization, UserRole


DEFAULT_NOTIFICATION_PREFERENCES: dict[str, bool] = {
    "applications": True,
    "weekly_summary": True,
    "product_updates": False,
    "industry_updates": False,
    "community_events": False,
    "other_notifications": False,
}


# ==================== User Profile ===================== #
@audit_changes
class UserProfile(Base):
    """
    Staff account. Belongs to at most one organization.
    """

    __tablename__: str = "user_profiles"
    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, nullable=False, autoincrement=True
    )
    organization_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notification_preferences: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    organization: Mapped["Organization | None"] = relationship(
        "Organization", back_populates="members"
    )
    role_assignments: Mapped[list["UserRole"]] = relationship(
        "UserRole",
        foreign_keys="UserRole.user_id",
        back_populates="user",
        cascade="all, delete-orphan",
    )
