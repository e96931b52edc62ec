"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("two_factor_auth", sa.Boolean(), nullable=False),
        sa.Column("email_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("number_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("id_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("address_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("user_level", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "session",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("token", sa.String(512), nullable=False),
        sa.Column("ip_address", sa.String(128), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("two_fa_verified", sa.Boolean(), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_session_token", "session", ["token"], unique=True)
    op.create_index("idx_session_userId", "session", ["user_id"])

    op.create_table(
        "one_time_code",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("code", sa.String(6), nullable=False),
        sa.Column("operation", sa.String(32), nullable=False),
        sa.Column("operation_type", sa.String(16), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "notification",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(64), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("idx_notification_user_created", "notification", ["user_id", sa.text("created_at DESC")])

    op.create_table(
        "notification_read",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("notification_id", sa.String(64), sa.ForeignKey("notification.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("notification_id", "user_id", name="uq_notification_read_notification_user"),
    )
    op.create_index("idx_notification_read_user", "notification_read", ["user_id"])

    op.create_table(
        "verification_record",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("kind", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("doc_type", sa.String(64), nullable=False),
        sa.Column("issuing_country", sa.String(128), nullable=True),
        sa.Column("residence_country", sa.String(128), nullable=True),
        sa.Column("residence_state", sa.String(128), nullable=True),
        sa.Column("residence_city", sa.String(128), nullable=True),
        sa.Column("address_line1", sa.String(255), nullable=True),
        sa.Column("address_line2", sa.String(255), nullable=True),
        sa.Column("residence_zip", sa.String(32), nullable=True),
        sa.Column("document_front_image", sa.String(512), nullable=False),
        sa.Column("document_back_image", sa.String(512), nullable=True),
        sa.Column("remark", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "idx_verification_record_user_kind",
        "verification_record",
        ["user_id", "kind", sa.text("created_at DESC")],
    )
    op.create_index("idx_verification_record_kind_status", "verification_record", ["kind", "status"])


def downgrade() -> None:
    op.drop_table("verification_record")
    op.drop_table("notification_read")
    op.drop_table("notification")
    op.drop_table("one_time_code")
    op.drop_table("session")
    op.drop_table("user")
