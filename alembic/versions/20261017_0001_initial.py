"""
Initial festival schema: events, catalog, registrations, admins, error log.

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def _money(name: str, nullable: bool = True, default: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.Numeric(10, 2),
        nullable=nullable,
        server_default=sa.text("0") if default else None,
    )


def upgrade() -> None:
    op.create_table(
        "AdminUser",
        sa.Column("AdminID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("Username", sa.String(length=100), nullable=False, unique=True),
        sa.Column("Email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("HashedPassword", sa.String(length=255), nullable=False),
        sa.Column("Role", sa.String(length=16), nullable=False, server_default=sa.text("'admin'")),
        sa.Column("IsActive", sa.Boolean(), server_default=sa.text("1")),
        sa.Column("LastLoginAt", sa.DateTime(), nullable=True),
        sa.Column("CreatedAt", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("UpdatedAt", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "Event",
        sa.Column("EventID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("Name", sa.String(length=255), nullable=False),
        sa.Column("Year", sa.Integer(), nullable=False, unique=True),
        sa.Column("StartDate", sa.DateTime(), nullable=False),
        sa.Column("EndDate", sa.DateTime(), nullable=False),
        sa.Column("RegistrationOpenDate", sa.DateTime(), nullable=False),
        sa.Column("RegistrationCloseDate", sa.DateTime(), nullable=False),
        sa.Column("Description", sa.Text(), nullable=True),
        sa.Column("Venue", sa.String(length=255), nullable=False),
        sa.Column("IsActive", sa.Boolean(), server_default=sa.text("1")),
        sa.Column("IsCurrent", sa.Boolean(), server_default=sa.text("0")),
        _money("WorkshopStandardPrice"),
        _money("WorkshopEarlyBirdPrice"),
        sa.Column("WorkshopEarlyBirdEndDate", sa.DateTime(), nullable=True),
        _money("FullPackageStandardPrice"),
        _money("FullPackageEarlyBirdPrice"),
        sa.Column("FullPackageEarlyBirdEndDate", sa.DateTime(), nullable=True),
        _money("FullPackage24HourPrice"),
        sa.Column("FullPackage24HourStartDate", sa.DateTime(), nullable=True),
        sa.Column("FullPackage24HourEndDate", sa.DateTime(), nullable=True),
        _money("EveningPackageStandardPrice"),
        _money("EveningPackageEarlyBirdPrice"),
        sa.Column("EveningPackageEarlyBirdEndDate", sa.DateTime(), nullable=True),
        _money("EveningPackage24HourPrice"),
        sa.Column("EveningPackage24HourStartDate", sa.DateTime(), nullable=True),
        sa.Column("EveningPackage24HourEndDate", sa.DateTime(), nullable=True),
        _money("Accommodation4NightsSinglePrice"),
        _money("Accommodation4NightsDoublePrice"),
        _money("Accommodation4NightsEarlyBirdSinglePrice"),
        _money("Accommodation4NightsEarlyBirdDoublePrice"),
        sa.Column("Accommodation4NightsEarlyBirdEndDate", sa.DateTime(), nullable=True),
        _money("Accommodation3NightsSinglePrice"),
        _money("Accommodation3NightsDoublePrice"),
        _money("Accommodation3NightsEarlyBirdSinglePrice"),
        _money("Accommodation3NightsEarlyBirdDoublePrice"),
        sa.Column("Accommodation3NightsEarlyBirdEndDate", sa.DateTime(), nullable=True),
        sa.Column("CreatedAt", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("UpdatedAt", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "GalaTable",
        sa.Column("TableID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("EventID", sa.Integer(), sa.ForeignKey("Event.EventID"), nullable=False),
        sa.Column("TableNumber", sa.Integer(), nullable=False),
        sa.Column("TotalSeats", sa.Integer(), nullable=False, server_default=sa.text("6")),
        sa.Column("OccupiedSeats", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("IsVip", sa.Boolean(), server_default=sa.text("0")),
        _money("Price", nullable=False, default=False),
        _money("EarlyBirdPrice"),
        sa.Column("EarlyBirdEndDate", sa.DateTime(), nullable=True),
        sa.Column("IsActive", sa.Boolean(), server_default=sa.text("1")),
        sa.UniqueConstraint("EventID", "TableNumber", name="uq_galatable_event_number"),
    )

    op.create_table(
        "SeatingLayout",
        sa.Column("LayoutID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("EventID", sa.Integer(), sa.ForeignKey("Event.EventID"), nullable=True, unique=True),
        sa.Column("Layout", sa.JSON(), nullable=False),
        sa.Column("CreatedAt", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("UpdatedAt", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "Addon",
        sa.Column("AddonID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("EventID", sa.Integer(), sa.ForeignKey("Event.EventID"), nullable=False),
        sa.Column("Code", sa.String(length=50), nullable=False),
        sa.Column("Name", sa.String(length=120), nullable=False),
        sa.Column("Description", sa.Text(), nullable=True),
        _money("Price", nullable=False),
        sa.Column(
            "Category", sa.String(length=32), nullable=False, server_default=sa.text("'merchandise'")
        ),
        sa.Column("Kind", sa.String(length=16), nullable=True),
        sa.Column("Options", sa.JSON(), nullable=True),
        sa.Column("IsActive", sa.Boolean(), server_default=sa.text("1")),
        sa.Column("CreatedAt", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("UpdatedAt", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("EventID", "Code", name="uq_addon_event_code"),
    )

    op.create_table(
        "Workshop",
        sa.Column("WorkshopID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("EventID", sa.Integer(), sa.ForeignKey("Event.EventID"), nullable=False),
        sa.Column("Title", sa.String(length=255), nullable=False),
        sa.Column("Instructor", sa.String(length=255), nullable=False),
        sa.Column("Level", sa.String(length=32), nullable=False),
        sa.Column("Description", sa.Text(), nullable=True),
        sa.Column("Date", sa.DateTime(), nullable=False),
        sa.Column("Time", sa.String(length=32), nullable=False),
        _money("Price", nullable=False),
        sa.Column("Capacity", sa.Integer(), nullable=False),
        sa.Column("Enrolled", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("LeaderCapacity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("FollowerCapacity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("LeadersEnrolled", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("FollowersEnrolled", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )

    op.create_table(
        "Milonga",
        sa.Column("MilongaID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("EventID", sa.Integer(), sa.ForeignKey("Event.EventID"), nullable=False),
        sa.Column("Name", sa.String(length=255), nullable=False),
        sa.Column("Description", sa.Text(), nullable=True),
        sa.Column("Date", sa.DateTime(), nullable=False),
        sa.Column("Time", sa.String(length=32), nullable=False),
        sa.Column("Venue", sa.String(length=255), nullable=False),
        _money("Price", nullable=False),
        _money("EarlyBirdPrice"),
        sa.Column("EarlyBirdEndDate", sa.DateTime(), nullable=True),
        sa.Column("Type", sa.String(length=16), nullable=False, server_default=sa.text("'regular'")),
        sa.Column("Capacity", sa.Integer(), nullable=False),
        sa.Column("Enrolled", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )

    op.create_table(
        "Registration",
        sa.Column("RegistrationID", sa.String(length=36), primary_key=True),
        sa.Column("EventID", sa.Integer(), sa.ForeignKey("Event.EventID"), nullable=False),
        sa.Column("PackageType", sa.String(length=64), nullable=False),
        sa.Column("Role", sa.String(length=16), nullable=False),
        sa.Column("LeaderInfo", sa.JSON(), nullable=True),
        sa.Column("FollowerInfo", sa.JSON(), nullable=True),
        sa.Column("WorkshopIDs", sa.JSON(), nullable=False),
        sa.Column("MilongaIDs", sa.JSON(), nullable=False),
        sa.Column("SelectedTableNumber", sa.Integer(), nullable=True),
        sa.Column("WantsWorkshops", sa.Boolean(), nullable=True),
        sa.Column("Addons", sa.JSON(), nullable=False),
        sa.Column("PriceBreakdown", sa.JSON(), nullable=False),
        _money("TotalAmount", nullable=False, default=False),
        sa.Column("Currency", sa.String(length=8), nullable=False, server_default=sa.text("'AED'")),
        sa.Column("PaymentMethod", sa.String(length=16), nullable=True),
        sa.Column(
            "PaymentStatus", sa.String(length=16), nullable=False, server_default=sa.text("'pending'")
        ),
        sa.Column("StripePaymentIntentID", sa.String(length=255), nullable=True),
        sa.Column("CreatedAt", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("PaidAt", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_Registration_EventID", "Registration", ["EventID"], unique=False)

    op.create_table(
        "AppErrorLog",
        sa.Column("ErrorID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("OccurredAt", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("RequestID", sa.String(length=64), nullable=True),
        sa.Column("Path", sa.String(length=500), nullable=True),
        sa.Column("Method", sa.String(length=16), nullable=True),
        sa.Column("StatusCode", sa.Integer(), nullable=True),
        sa.Column("AdminID", sa.Integer(), nullable=True),
        sa.Column("ClientIP", sa.String(length=45), nullable=True),
        sa.Column("UserAgent", sa.String(length=255), nullable=True),
        sa.Column("Message", sa.Text(), nullable=True),
        sa.Column("StackTrace", sa.Text(), nullable=True),
    )
    op.create_index("ix_AppErrorLog_OccurredAt", "AppErrorLog", ["OccurredAt"], unique=False)
    op.create_index("ix_AppErrorLog_RequestID", "AppErrorLog", ["RequestID"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_AppErrorLog_RequestID", table_name="AppErrorLog")
    op.drop_index("ix_AppErrorLog_OccurredAt", table_name="AppErrorLog")
    op.drop_table("AppErrorLog")
    op.drop_index("ix_Registration_EventID", table_name="Registration")
    for name in ("Registration", "Milonga", "Workshop", "Addon", "SeatingLayout", "GalaTable"):
        op.drop_table(name)
    op.drop_table("Event")
    op.drop_table("AdminUser")
