# File: /alembic/versions/0001_interface_schema.py | Version: 1.0 | Title: Tables, rows, views (filters/groups/sorts), interface pages and blocks
"""interface schema"""

from alembic import op
import sqlalchemy as sa

revision = "0001_interface_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "tables",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "table_fields",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("table_id", sa.String(), sa.ForeignKey("tables.id"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("options", sa.JSON(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=True),
        sa.UniqueConstraint("table_id", "name", name="uq_table_field_name"),
    )
    op.create_index("ix_table_fields_table_id", "table_fields", ["table_id"])
    op.create_table(
        "table_rows",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("table_id", sa.String(), sa.ForeignKey("tables.id"), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_table_rows_table", "table_rows", ["table_id"])

    op.create_table(
        "views",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("table_id", sa.String(), sa.ForeignKey("tables.id"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("config", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_views_table", "views", ["table_id"])
    op.create_table(
        "view_filter_groups",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("view_id", sa.String(), sa.ForeignKey("views.id"), nullable=False),
        sa.Column("condition_type", sa.String(3), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=True),
    )
    op.create_index("ix_view_filter_groups_view_id", "view_filter_groups", ["view_id"])
    op.create_table(
        "view_filters",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("view_id", sa.String(), sa.ForeignKey("views.id"), nullable=False),
        sa.Column("field_name", sa.String(200), nullable=False),
        sa.Column("operator", sa.String(50), nullable=False),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.Column("value2", sa.JSON(), nullable=True),
        sa.Column("filter_group_id", sa.String(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=True),
    )
    op.create_index("ix_view_filters_view_id", "view_filters", ["view_id"])
    op.create_table(
        "view_sorts",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("view_id", sa.String(), sa.ForeignKey("views.id"), nullable=False),
        sa.Column("field_name", sa.String(200), nullable=False),
        sa.Column("direction", sa.String(4), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=True),
    )
    op.create_index("ix_view_sorts_view_id", "view_sorts", ["view_id"])

    op.create_table(
        "interface_pages",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("page_type", sa.String(30), nullable=False),
        sa.Column("base_table", sa.String(), sa.ForeignKey("tables.id"), nullable=True),
        sa.Column("config", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "page_blocks",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("page_id", sa.String(), sa.ForeignKey("interface_pages.id"), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("config", sa.JSON(), nullable=True),
        sa.Column("position_x", sa.Integer(), nullable=True),
        sa.Column("position_y", sa.Integer(), nullable=True),
        sa.Column("width", sa.Integer(), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=True),
    )
    op.create_index("ix_page_blocks_page_id", "page_blocks", ["page_id"])


def downgrade():
    op.drop_index("ix_page_blocks_page_id", table_name="page_blocks")
    op.drop_table("page_blocks")
    op.drop_table("interface_pages")
    op.drop_index("ix_view_sorts_view_id", table_name="view_sorts")
    op.drop_table("view_sorts")
    op.drop_index("ix_view_filters_view_id", table_name="view_filters")
    op.drop_table("view_filters")
    op.drop_index("ix_view_filter_groups_view_id", table_name="view_filter_groups")
    op.drop_table("view_filter_groups")
    op.drop_index("ix_views_table", table_name="views")
    op.drop_table("views")
    op.drop_index("ix_table_rows_table", table_name="table_rows")
    op.drop_table("table_rows")
    op.drop_index("ix_table_fields_table_id", table_name="table_fields")
    op.drop_table("table_fields")
    op.drop_table("tables")
