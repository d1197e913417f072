"""Initial schema – every termdeck table

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

Creates the tables in foreign-key order (the same order the schema registry
uses).  Timestamps are unix-second integers.
"""

from alembic import op
import sqlalchemy as sa

# Alembic revision identifiers
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.Integer(), nullable=False),
    ]


def upgrade() -> None:
    # -- settings -------------------------------------------------------
    op.create_table(
        "settings",
        sa.Column("key", sa.String(255), primary_key=True),
        sa.Column("value", sa.Text(), nullable=True),
    )

    # -- users / audit_logs ---------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("detail", sa.Text(), nullable=True),
        sa.Column("request_ip", sa.String(45), nullable=True),
        sa.Column("created_at", sa.Integer(), nullable=False),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])

    # -- proxies / ssh_keys ---------------------------------------------
    op.create_table(
        "proxies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.Enum("SOCKS5", "HTTP", name="proxy_server_type"), nullable=False),
        sa.Column("host", sa.String(255), nullable=False),
        sa.Column("port", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(255), nullable=True),
        sa.Column(
            "auth_method",
            sa.Enum("none", "password", "key", name="proxy_auth_method"),
            nullable=False,
        ),
        sa.Column("encrypted_password", sa.Text(), nullable=True),
        sa.Column("encrypted_private_key", sa.Text(), nullable=True),
        sa.Column("encrypted_passphrase", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "ssh_keys",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("encrypted_private_key", sa.Text(), nullable=False),
        sa.Column("encrypted_passphrase", sa.Text(), nullable=True),
        *_timestamps(),
    )

    # -- connections / tags ---------------------------------------------
    op.create_table(
        "connections",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=True, unique=True),
        sa.Column("type", sa.Enum("SSH", "RDP", "VNC", name="connection_type"), nullable=False),
        sa.Column("host", sa.String(255), nullable=False),
        sa.Column("port", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column(
            "auth_method",
            sa.Enum("password", "key", name="connection_auth_method"),
            nullable=False,
        ),
        # base64( nonce || ciphertext || GCM tag ) – never plaintext
        sa.Column("encrypted_password", sa.Text(), nullable=True),
        sa.Column("encrypted_private_key", sa.Text(), nullable=True),
        sa.Column("encrypted_passphrase", sa.Text(), nullable=True),
        sa.Column(
            "proxy_id",
            sa.Integer(),
            sa.ForeignKey("proxies.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("proxy_type", sa.Enum("proxy", "jump", name="connection_proxy_type"), nullable=True),
        sa.Column(
            "ssh_key_id",
            sa.Integer(),
            sa.ForeignKey("ssh_keys.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("jump_chain", sa.Text(), nullable=True),
        *_timestamps(),
        sa.Column("last_connected_at", sa.Integer(), nullable=True),
    )

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        "connection_tags",
        sa.Column(
            "connection_id",
            sa.Integer(),
            sa.ForeignKey("connections.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "tag_id",
            sa.Integer(),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_index("ix_connection_tags_tag_id", "connection_tags", ["tag_id"])

    # -- command_history ------------------------------------------------
    op.create_table(
        "command_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("command", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.Integer(), nullable=False),
    )
    op.create_index("ix_command_history_timestamp", "command_history", ["timestamp"])
    op.create_index(
        "ux_command_history_command", "command_history", ["command"],
        unique=True, mysql_length=255,
    )

    # -- appearance -----------------------------------------------------
    op.create_table(
        "terminal_themes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("theme_data", sa.Text(), nullable=False),
        sa.Column("is_preset", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "appearance_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "active_terminal_theme_id",
            sa.Integer(),
            sa.ForeignKey("terminal_themes.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("terminal_font_family", sa.String(255), nullable=False),
        sa.Column("terminal_font_size", sa.Integer(), nullable=False),
        sa.Column("editor_font_size", sa.Integer(), nullable=False),
        sa.Column("page_background_image", sa.String(2048), nullable=True),
        sa.Column("updated_at", sa.Integer(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("appearance_settings")
    op.drop_table("terminal_themes")
    op.drop_index("ux_command_history_command", table_name="command_history")
    op.drop_index("ix_command_history_timestamp", table_name="command_history")
    op.drop_table("command_history")
    op.drop_index("ix_connection_tags_tag_id", table_name="connection_tags")
    op.drop_table("connection_tags")
    op.drop_table("tags")
    op.drop_table("connections")
    op.drop_table("ssh_keys")
    op.drop_table("proxies")
    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_index("ix_audit_logs_user_id", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    op.drop_table("settings")
