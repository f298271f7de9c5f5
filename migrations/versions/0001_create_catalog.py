from alembic import op
import sqlalchemy as sa

revision = "0001_create_catalog"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column("images", sa.JSON(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_favorite", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("featured_haken", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("featured_borduren", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("featured_order_haken", sa.Integer(), nullable=True),
        sa.Column("featured_order_borduren", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    for table in ("categories", "headcategories"):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("slug", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("type", sa.String(length=32), nullable=True),
            sa.Column("headimageurl", sa.String(length=1024), nullable=True),
            sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )
        op.create_index(f"ix_{table}_slug", table, ["slug"])
    op.create_table(
        "item_categories",
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("items.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_table(
        "headcategories_categories",
        sa.Column("headcategory_id", sa.Integer(), sa.ForeignKey("headcategories.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    )

def downgrade():
    op.drop_table("headcategories_categories")
    op.drop_table("item_categories")
    for table in ("headcategories", "categories"):
        op.drop_index(f"ix_{table}_slug", table_name=table)
        op.drop_table(table)
    op.drop_table("items")
