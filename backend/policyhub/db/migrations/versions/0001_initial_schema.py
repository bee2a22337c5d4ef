"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "agents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("agent_name", sa.String(100), nullable=False),
        sa.Column("agent_code", sa.String(50), nullable=True, unique=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_agents_agent_name", "agents", ["agent_name"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("street", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("zip_code", sa.String(20), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("phone_number", sa.String(50), nullable=False),
        sa.Column("gender", sa.String(20), nullable=False),
        sa.Column("user_type", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_accounts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_name", sa.String(100), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("account_number", sa.String(50), nullable=True, unique=True),
        sa.Column("account_type", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("account_name", "user_id", name="uq_user_accounts_name_user"),
    )
    op.create_index("ix_user_accounts_account_name", "user_accounts", ["account_name"])
    op.create_index("ix_user_accounts_user_id", "user_accounts", ["user_id"])

    op.create_table(
        "policy_categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("category_name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("category_code", sa.String(50), nullable=True, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_policy_categories_category_name", "policy_categories", ["category_name"], unique=True,
    )

    op.create_table(
        "policy_carriers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("company_name", sa.String(100), nullable=False),
        sa.Column("company_code", sa.String(50), nullable=True, unique=True),
        sa.Column("street", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("zip_code", sa.String(20), nullable=True),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("license_number", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_policy_carriers_company_name", "policy_carriers", ["company_name"], unique=True,
    )

    op.create_table(
        "policies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("policy_number", sa.String(100), nullable=False),
        sa.Column("policy_start_date", sa.Date(), nullable=False),
        sa.Column("policy_end_date", sa.Date(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "category_id", sa.Integer(), sa.ForeignKey("policy_categories.id"), nullable=False,
        ),
        sa.Column(
            "carrier_id", sa.Integer(), sa.ForeignKey("policy_carriers.id"), nullable=False,
        ),
        sa.Column("agent_id", sa.Integer(), sa.ForeignKey("agents.id"), nullable=True),
        sa.Column("collection_id", sa.String(100), nullable=True),
        sa.Column("company_collection_id", sa.String(100), nullable=True),
        sa.Column("premium_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("coverage_amount", sa.Numeric(16, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("payment_frequency", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("policy_end_date > policy_start_date", name="ck_policies_dates"),
        sa.CheckConstraint("premium_amount >= 0", name="ck_policies_premium"),
        sa.CheckConstraint("coverage_amount >= 0", name="ck_policies_coverage"),
    )
    op.create_index("ix_policies_policy_number", "policies", ["policy_number"], unique=True)
    op.create_index("ix_policies_user_id", "policies", ["user_id"])
    op.create_index("ix_policies_category_id", "policies", ["category_id"])
    op.create_index("ix_policies_carrier_id", "policies", ["carrier_id"])
    op.create_index("ix_policies_agent_id", "policies", ["agent_id"])
    op.create_index("ix_policies_status", "policies", ["status"])

    op.create_table(
        "scheduled_tasks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("job_id", sa.String(64), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("scheduled_date", sa.String(10), nullable=False),
        sa.Column("scheduled_time", sa.String(5), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_scheduled_tasks_job_id", "scheduled_tasks", ["job_id"], unique=True)
    op.create_index("ix_scheduled_tasks_scheduled_at", "scheduled_tasks", ["scheduled_at"])
    op.create_index("ix_scheduled_tasks_status", "scheduled_tasks", ["status"])

    op.create_table(
        "ingestion_runs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("execution_id", sa.String(36), nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("file_type", sa.String(10), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("total_records", sa.Integer(), nullable=True),
        sa.Column("successful_inserts", sa.Integer(), nullable=True),
        sa.Column("error_count", sa.Integer(), nullable=True),
        sa.Column("summary", sa.JSON(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_ingestion_runs_execution_id", "ingestion_runs", ["execution_id"], unique=True,
    )
    op.create_index("ix_ingestion_runs_status", "ingestion_runs", ["status"])
    op.create_index("ix_ingestion_runs_started_at", "ingestion_runs", ["started_at"])


def downgrade() -> None:
    op.drop_table("ingestion_runs")
    op.drop_table("scheduled_tasks")
    op.drop_table("policies")
    op.drop_table("policy_carriers")
    op.drop_table("policy_categories")
    op.drop_table("user_accounts")
    op.drop_table("users")
    op.drop_table("agents")
