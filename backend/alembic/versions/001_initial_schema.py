"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum columns store member names
USER_ROLES = ("ADMIN", "MANAGER", "TAILOR", "SALES")
MATERIAL_TYPES = ("FABRIC", "BUTTON", "THREAD", "ZIPPER", "LINING", "OTHER")
MATERIAL_UNITS = ("METERS", "YARDS", "PIECES", "SPOOLS", "BOX")
MOVEMENT_TYPES = ("IN", "OUT", "ADJUSTMENT")
ORDER_STATUSES = (
    "DRAFT", "PENDING", "MEASURED", "CUTTING", "STITCHING",
    "TRIAL", "READY", "DELIVERED", "IN_PROGRESS", "CANCELLED",
)
PAYMENT_STATUSES = ("PENDING", "PAID", "FAILED")
PO_STATUSES = ("DRAFT", "ORDERED", "RECEIVED", "CANCELLED")
PO_PAYMENT_STATUSES = ("PENDING", "PAID")
TRANSACTION_TYPES = ("INCOME", "EXPENSE")
PAYMENT_METHODS = ("CASH", "CARD", "BANK_TRANSFER", "CHECK", "OTHER")
JOB_STATUSES = ("PENDING", "IN_PROGRESS", "COMPLETED", "ON_HOLD")


def _document_columns():
    """Id, timestamp and soft-delete columns shared by document tables."""
    return [
        sa.Column("id", sa.String(24), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), server_default="0", nullable=False, index=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # Users table
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum(*USER_ROLES, name="userrole"), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean(), default=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Materials and the stock movement ledger
    op.create_table(
        "materials",
        *_document_columns(),
        sa.Column("name", sa.String(255), nullable=False, index=True),
        sa.Column("type", sa.Enum(*MATERIAL_TYPES, name="materialtype"), nullable=False),
        sa.Column("color", sa.String(100), nullable=True),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit", sa.Enum(*MATERIAL_UNITS, name="materialunit"), nullable=False),
        sa.Column("cost_per_unit", sa.Float(), nullable=False),
        sa.Column("supplier", sa.String(255), nullable=True),
        sa.Column("low_stock_threshold", sa.Float(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sku", sa.String(64), unique=True, nullable=False, index=True),
    )

    op.create_table(
        "stock_movements",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "material_id", sa.String(24),
            sa.ForeignKey("materials.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("type", sa.Enum(*MOVEMENT_TYPES, name="movementtype"), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("reason", sa.String(100), nullable=False),
        sa.Column("reference", sa.String(255), nullable=True, index=True),
        sa.Column("performed_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
    )

    # Catalogue
    op.create_table(
        "styles",
        *_document_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("base_price", sa.Float(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(100), nullable=False, index=True),
    )

    op.create_table(
        "item_types",
        *_document_columns(),
        sa.Column("name", sa.String(100), unique=True, nullable=False, index=True),
        sa.Column("fields", sa.JSON(), nullable=False),
        sa.Column("image", sa.String(500), nullable=True),
    )

    # Customers and measurement history
    op.create_table(
        "customers",
        *_document_columns(),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("nic", sa.String(50), nullable=False, index=True),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
    )

    op.create_table(
        "measurement_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "customer_id", sa.String(24),
            sa.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("order_id", sa.String(24), nullable=True, index=True),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("measurements", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.UniqueConstraint("customer_id", "order_id", name="uq_measurement_customer_order"),
    )

    # Orders
    op.create_table(
        "orders",
        *_document_columns(),
        sa.Column("customer_id", sa.String(24), sa.ForeignKey("customers.id"), nullable=False, index=True),
        sa.Column("style_id", sa.String(24), sa.ForeignKey("styles.id"), nullable=False, index=True),
        sa.Column("order_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("fit_on_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivery_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("discount", sa.Float(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.Enum(*ORDER_STATUSES, name="orderstatus"), nullable=False, index=True),
        sa.Column("measurement_snapshot", sa.JSON(), nullable=False),
        sa.Column("payment_status", sa.Enum(*PAYMENT_STATUSES, name="paymentstatus"), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("transaction_id", sa.String(100), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    )

    op.create_table(
        "order_materials",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "order_id", sa.String(24),
            sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("material_id", sa.String(24), nullable=False, index=True),
        sa.Column("quantity", sa.Float(), nullable=False),
    )

    # Staff
    op.create_table(
        "employees",
        *_document_columns(),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("nic", sa.String(50), nullable=False, index=True),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=False, index=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("salary", sa.Float(), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
    )

    op.create_table(
        "jobs",
        *_document_columns(),
        sa.Column(
            "order_id", sa.String(24),
            sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column(
            "employee_id", sa.String(24),
            sa.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("assigned_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("status", sa.Enum(*JOB_STATUSES, name="jobstatus"), nullable=False, index=True),
    )

    # Procurement
    op.create_table(
        "suppliers",
        *_document_columns(),
        sa.Column("name", sa.String(255), nullable=False, index=True),
        sa.Column("contact_person", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("payment_terms", sa.String(100), nullable=True),
    )

    op.create_table(
        "purchase_orders",
        *_document_columns(),
        sa.Column("supplier_id", sa.String(24), sa.ForeignKey("suppliers.id"), nullable=False, index=True),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("status", sa.Enum(*PO_STATUSES, name="postatus"), nullable=False),
        sa.Column("payment_status", sa.Enum(*PO_PAYMENT_STATUSES, name="popaymentstatus"), nullable=False),
        sa.Column("order_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("expected_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("received_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    )

    op.create_table(
        "purchase_order_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "purchase_order_id", sa.String(24),
            sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column("material_id", sa.String(24), nullable=False, index=True),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit_cost", sa.Float(), nullable=False),
        sa.Column("total", sa.Float(), nullable=False),
    )

    # Finance ledger
    op.create_table(
        "transactions",
        *_document_columns(),
        sa.Column("type", sa.Enum(*TRANSACTION_TYPES, name="transactiontype"), nullable=False, index=True),
        sa.Column("category", sa.String(100), nullable=False, index=True),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("reference", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("payment_method", sa.Enum(*PAYMENT_METHODS, name="paymentmethod"), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
        sa.Column("recorded_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    )

    # Audit log
    op.create_table(
        "audit_log_entries",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("user_id", sa.Integer(), nullable=True, index=True),
        sa.Column("user_name", sa.String(200), nullable=True),
        sa.Column("action", sa.String(50), nullable=False, index=True),
        sa.Column("entity_type", sa.String(50), nullable=True, index=True),
        sa.Column("entity_id", sa.String(50), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True, index=True),
    )


def downgrade() -> None:
    for table in (
        "audit_log_entries",
        "transactions",
        "purchase_order_items",
        "purchase_orders",
        "suppliers",
        "jobs",
        "employees",
        "order_materials",
        "orders",
        "measurement_history",
        "customers",
        "item_types",
        "styles",
        "stock_movements",
        "materials",
        "users",
    ):
        op.drop_table(table)
