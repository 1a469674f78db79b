"""Initial schema: employees, catalog, customers, sales, rentals, returns

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19

This migration creates:
1. Employees, employee action log and login sessions
2. Products and rental products (shelf-code keys, non-negative stock)
3. Customers (keyed by phone) and coupons
4. Sales transactions and their line items
5. Rental transactions and their line items
6. Return transactions and their line items (one return per rental item)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(precision=14, scale=6)
NOW = sa.text('(CURRENT_TIMESTAMP)')


def upgrade():
    # ==========================================================================
    # 1. EMPLOYEES, LOGS, SESSIONS
    # ==========================================================================
    op.create_table('employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('position', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.CheckConstraint("position IN ('Admin', 'Cashier')", name='ck_employees_position'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('employees', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_employees_username'), ['username'], unique=True)

    op.create_table('employee_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('details', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('employee_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_employee_logs_employee_id'), ['employee_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_employee_logs_action'), ['action'], unique=False)
        batch_op.create_index(batch_op.f('ix_employee_logs_created_at'), ['created_at'], unique=False)
        batch_op.create_index('ix_employee_logs_employee_created', ['employee_id', 'created_at'], unique=False)

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_session_tokens_employee_id'), ['employee_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_token_hash'), ['token_hash'], unique=True)

    # ==========================================================================
    # 2. CATALOG
    # ==========================================================================
    op.create_table('products',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.create_index('ix_products_category', ['category'], unique=False)

    op.create_table('rental_products',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('rental_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.CheckConstraint('stock >= 0', name='ck_rental_products_stock_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('rental_products', schema=None) as batch_op:
        batch_op.create_index('ix_rental_products_category', ['category'], unique=False)

    # ==========================================================================
    # 3. CUSTOMERS AND COUPONS
    # ==========================================================================
    op.create_table('customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('customers', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_customers_phone'), ['phone'], unique=True)

    op.create_table('coupons',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('discount_percentage', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('coupons', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_coupons_code'), ['code'], unique=True)

    # ==========================================================================
    # 4. SALES
    # ==========================================================================
    op.create_table('sales_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('subtotal', MONEY, nullable=False),
        sa.Column('discount', MONEY, nullable=False),
        sa.Column('tax', MONEY, nullable=False),
        sa.Column('total', MONEY, nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('coupon_code', sa.String(length=32), nullable=True),
        sa.Column('cash_received', MONEY, nullable=True),
        sa.Column('change_due', MONEY, nullable=True),
        sa.Column('cashback', MONEY, nullable=True),
        sa.Column('card_last4', sa.String(length=4), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('sales_transactions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_sales_transactions_employee_id'), ['employee_id'], unique=False)
        batch_op.create_index('ix_sales_transactions_created', ['created_at'], unique=False)

    op.create_table('sales_transaction_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('transaction_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(length=32), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', MONEY, nullable=False),
        sa.Column('subtotal', MONEY, nullable=False),
        sa.ForeignKeyConstraint(['transaction_id'], ['sales_transactions.id'], ),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('sales_transaction_items', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_sales_transaction_items_transaction_id'), ['transaction_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_sales_transaction_items_product_id'), ['product_id'], unique=False)

    # ==========================================================================
    # 5. RENTALS
    # ==========================================================================
    op.create_table('rental_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('total', MONEY, nullable=False),
        sa.Column('return_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=True),
        sa.Column('cash_received', MONEY, nullable=True),
        sa.Column('change_due', MONEY, nullable=True),
        sa.Column('cashback', MONEY, nullable=True),
        sa.Column('card_last4', sa.String(length=4), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.CheckConstraint(
            "status IN ('active', 'returned', 'overdue')",
            name='ck_rental_transactions_status',
        ),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('rental_transactions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_rental_transactions_customer_id'), ['customer_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_rental_transactions_employee_id'), ['employee_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_rental_transactions_status'), ['status'], unique=False)
        batch_op.create_index('ix_rental_transactions_customer_status', ['customer_id', 'status'], unique=False)
        batch_op.create_index('ix_rental_transactions_created', ['created_at'], unique=False)

    op.create_table('rental_transaction_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('rental_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(length=32), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('rental_price', MONEY, nullable=False),
        sa.Column('subtotal', MONEY, nullable=False),
        sa.ForeignKeyConstraint(['rental_id'], ['rental_transactions.id'], ),
        sa.ForeignKeyConstraint(['product_id'], ['rental_products.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('rental_transaction_items', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_rental_transaction_items_rental_id'), ['rental_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_rental_transaction_items_product_id'), ['product_id'], unique=False)

    # ==========================================================================
    # 6. RETURNS
    # ==========================================================================
    op.create_table('return_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('rental_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=16), nullable=False),
        sa.Column('late_fees', MONEY, nullable=False),
        sa.Column('total_due', MONEY, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(['rental_id'], ['rental_transactions.id'], ),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('return_transactions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_return_transactions_rental_id'), ['rental_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_return_transactions_customer_id'), ['customer_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_return_transactions_employee_id'), ['employee_id'], unique=False)
        batch_op.create_index('ix_return_transactions_created', ['created_at'], unique=False)

    op.create_table('return_transaction_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('return_id', sa.Integer(), nullable=False),
        sa.Column('rental_item_id', sa.Integer(), nullable=False),
        sa.Column('days_late', sa.Integer(), nullable=False),
        sa.Column('late_fee', MONEY, nullable=False),
        sa.ForeignKeyConstraint(['return_id'], ['return_transactions.id'], ),
        sa.ForeignKeyConstraint(['rental_item_id'], ['rental_transaction_items.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('rental_item_id', name='uq_return_items_rental_item'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('return_transaction_items', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_return_transaction_items_return_id'), ['return_id'], unique=False)


def downgrade():
    with op.batch_alter_table('return_transaction_items', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_return_transaction_items_return_id'))
    op.drop_table('return_transaction_items')

    with op.batch_alter_table('return_transactions', schema=None) as batch_op:
        batch_op.drop_index('ix_return_transactions_created')
        batch_op.drop_index(batch_op.f('ix_return_transactions_employee_id'))
        batch_op.drop_index(batch_op.f('ix_return_transactions_customer_id'))
        batch_op.drop_index(batch_op.f('ix_return_transactions_rental_id'))
    op.drop_table('return_transactions')

    with op.batch_alter_table('rental_transaction_items', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_rental_transaction_items_product_id'))
        batch_op.drop_index(batch_op.f('ix_rental_transaction_items_rental_id'))
    op.drop_table('rental_transaction_items')

    with op.batch_alter_table('rental_transactions', schema=None) as batch_op:
        batch_op.drop_index('ix_rental_transactions_created')
        batch_op.drop_index('ix_rental_transactions_customer_status')
        batch_op.drop_index(batch_op.f('ix_rental_transactions_status'))
        batch_op.drop_index(batch_op.f('ix_rental_transactions_employee_id'))
        batch_op.drop_index(batch_op.f('ix_rental_transactions_customer_id'))
    op.drop_table('rental_transactions')

    with op.batch_alter_table('sales_transaction_items', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_sales_transaction_items_product_id'))
        batch_op.drop_index(batch_op.f('ix_sales_transaction_items_transaction_id'))
    op.drop_table('sales_transaction_items')

    with op.batch_alter_table('sales_transactions', schema=None) as batch_op:
        batch_op.drop_index('ix_sales_transactions_created')
        batch_op.drop_index(batch_op.f('ix_sales_transactions_employee_id'))
    op.drop_table('sales_transactions')

    with op.batch_alter_table('coupons', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_coupons_code'))
    op.drop_table('coupons')

    with op.batch_alter_table('customers', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_customers_phone'))
    op.drop_table('customers')

    with op.batch_alter_table('rental_products', schema=None) as batch_op:
        batch_op.drop_index('ix_rental_products_category')
    op.drop_table('rental_products')

    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.drop_index('ix_products_category')
    op.drop_table('products')

    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_session_tokens_token_hash'))
        batch_op.drop_index(batch_op.f('ix_session_tokens_employee_id'))
    op.drop_table('session_tokens')

    with op.batch_alter_table('employee_logs', schema=None) as batch_op:
        batch_op.drop_index('ix_employee_logs_employee_created')
        batch_op.drop_index(batch_op.f('ix_employee_logs_created_at'))
        batch_op.drop_index(batch_op.f('ix_employee_logs_action'))
        batch_op.drop_index(batch_op.f('ix_employee_logs_employee_id'))
    op.drop_table('employee_logs')

    with op.batch_alter_table('employees', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_employees_username'))
    op.drop_table('employees')
