"""
Relational schema for the back-office store.

Declared once with SQLAlchemy Core so every repository builds its
statements from the same Table objects. Monetary columns hold integer
minor units (``*_cents``); see ``app.domain.value_objects.money``.
"""

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
)

metadata = MetaData()

customer = Table(
    "customer",
    metadata,
    Column("customer_id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String(50), nullable=False),
    Column("last_name", String(50), nullable=False),
    Column("email", String(120)),
)

location = Table(
    "location",
    metadata,
    Column("location_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
)

product = Table(
    "product",
    metadata,
    Column("product_id", Integer, primary_key=True, autoincrement=True),
    Column("sku", String(50), unique=True),
    Column("name", String(150), nullable=False),
    Column("unit_price_cents", BigInteger, nullable=False),
    CheckConstraint("unit_price_cents >= 0", name="ck_product_price_non_negative"),
)

payment_card = Table(
    "payment_card",
    metadata,
    Column("card_id", Integer, primary_key=True, autoincrement=True),
    Column("customer_id", Integer, ForeignKey("customer.customer_id"), nullable=False),
    Column("card_last4", String(4)),
)

account = Table(
    "account",
    metadata,
    Column("account_id", Integer, primary_key=True, autoincrement=True),
    Column("customer_id", Integer, ForeignKey("customer.customer_id"), nullable=False),
    Column("account_number", String(40), nullable=False, unique=True),
    Column("credit_limit_cents", BigInteger, nullable=True),
    Column("current_balance_cents", BigInteger, nullable=False, default=0, server_default="0"),
    Column("opened_date", Date),
    Column("status", String(20), nullable=False, default="ACTIVE", server_default="ACTIVE"),
)

order_header = Table(
    "order_header",
    metadata,
    Column("order_id", Integer, primary_key=True, autoincrement=True),
    Column("order_datetime", DateTime, nullable=False),
    Column("channel", String(20), nullable=False),
    Column("customer_id", Integer, ForeignKey("customer.customer_id"), nullable=False),
    Column("account_id", Integer, ForeignKey("account.account_id"), nullable=True),
    Column("location_id", Integer, ForeignKey("location.location_id"), nullable=True),
    Column("total_amount_cents", BigInteger, nullable=True),
    Column("status", String(20), nullable=False, default="PENDING", server_default="PENDING"),
)

order_line = Table(
    "order_line",
    metadata,
    Column("order_id", Integer, ForeignKey("order_header.order_id"), nullable=False),
    Column("line_no", Integer, nullable=False),
    Column("product_id", Integer, ForeignKey("product.product_id"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("unit_price_cents", BigInteger, nullable=False),
    Column("discount_amount_cents", BigInteger, nullable=True),
    PrimaryKeyConstraint("order_id", "line_no", name="pk_order_line"),
    CheckConstraint("quantity > 0", name="ck_order_line_quantity_positive"),
)

payment = Table(
    "payment",
    metadata,
    Column("payment_id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, ForeignKey("order_header.order_id"), nullable=True),
    Column("account_id", Integer, ForeignKey("account.account_id"), nullable=True),
    Column("card_id", Integer, ForeignKey("payment_card.card_id"), nullable=True),
    Column("payment_method", String(20), nullable=False),
    Column("amount_cents", BigInteger, nullable=False),
    Column("payment_date", DateTime, nullable=False),
    CheckConstraint("amount_cents > 0", name="ck_payment_amount_positive"),
)

inventory = Table(
    "inventory",
    metadata,
    Column("location_id", Integer, ForeignKey("location.location_id"), nullable=False),
    Column("product_id", Integer, ForeignKey("product.product_id"), nullable=False),
    Column("quantity_on_hand", Integer, nullable=False, default=0, server_default="0"),
    Column("reorder_level", Integer),
    Column("reorder_quantity", Integer),
    PrimaryKeyConstraint("location_id", "product_id", name="pk_inventory"),
)

LEDGER_TABLES = (account, order_header, order_line, payment, inventory)
