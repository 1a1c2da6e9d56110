"""Initial schema: teams, users, stores, products, carts, orders, histories, reports, graphics

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18

This migration creates:
1. Teams and users (teams.owner_id <-> users.team_id cycle, FK added after both exist)
2. Session tokens
3. Stores and products
4. Inventory histories (JSON evolutions)
5. Carts and cart items
6. Orders and per-store document sequences
7. Reports / graphics and their association rows
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261018_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    ]


def upgrade():
    # ==========================================================================
    # 1. USERS + TEAMS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('username', sa.String(length=60), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('picture', sa.String(length=2000), nullable=True),
        sa.Column('team_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index('ix_users_team_id', ['team_id'], unique=False)

    op.create_table('teams',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], name='fk_teams_owner_id_users'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_teams')),
        sa.UniqueConstraint('owner_id', name='uq_teams_owner_id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('teams', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_teams_owner_id'), ['owner_id'], unique=False)

    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_foreign_key(batch_op.f('fk_users_team_id_teams'), 'teams', ['team_id'], ['id'])

    # ==========================================================================
    # 2. SESSION TOKENS
    # ==========================================================================
    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name=op.f('fk_session_tokens_user_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_session_tokens')),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_session_tokens_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_token_hash'), ['token_hash'], unique=True)
        batch_op.create_index('ix_session_tokens_user_active', ['user_id', 'is_revoked'], unique=False)

    # ==========================================================================
    # 3. STORES + PRODUCTS
    # ==========================================================================
    op.create_table('stores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.String(length=100), nullable=True),
        sa.Column('address_line1', sa.String(length=500), nullable=True),
        sa.Column('address_line2', sa.String(length=500), nullable=True),
        sa.Column('address_country', sa.String(length=100), nullable=True),
        sa.Column('address_state', sa.String(length=100), nullable=True),
        sa.Column('address_city', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('picture', sa.String(length=2000), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], name=op.f('fk_stores_team_id_teams')),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], name=op.f('fk_stores_owner_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_stores')),
        sa.UniqueConstraint('team_id', 'name', name='uq_stores_team_name'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('stores', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_stores_team_id'), ['team_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_stores_owner_id'), ['owner_id'], unique=False)
        batch_op.create_index('ix_stores_team_owner', ['team_id', 'owner_id'], unique=False)

    op.create_table('products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('min_quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('picture', sa.String(length=2000), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], name=op.f('fk_products_team_id_teams')),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], name=op.f('fk_products_store_id_stores')),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], name=op.f('fk_products_owner_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_products')),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_products_team_id'), ['team_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_products_store_id'), ['store_id'], unique=False)
        batch_op.create_index('ix_products_store_name', ['store_id', 'name'], unique=False)
        batch_op.create_index('ix_products_team_store', ['team_id', 'store_id'], unique=False)

    # ==========================================================================
    # 4. INVENTORY HISTORIES
    # ==========================================================================
    op.create_table('histories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(length=100), nullable=False),
        sa.Column('evolutions', sa.JSON(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], name=op.f('fk_histories_product_id_products')),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], name=op.f('fk_histories_store_id_stores')),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], name=op.f('fk_histories_team_id_teams')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_histories')),
        sa.UniqueConstraint('product_id', 'store_id', 'team_id', name='uq_histories_product_store_team'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('histories', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_histories_product_id'), ['product_id'], unique=False)
        batch_op.create_index('ix_histories_team_store', ['team_id', 'store_id'], unique=False)

    # ==========================================================================
    # 5. CARTS
    # ==========================================================================
    op.create_table('carts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], name=op.f('fk_carts_store_id_stores')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name=op.f('fk_carts_user_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_carts')),
        sa.UniqueConstraint('store_id', 'user_id', name='uq_carts_store_user'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('carts', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_carts_store_id'), ['store_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_carts_user_id'), ['user_id'], unique=False)

    op.create_table('cart_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cart_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('total_price_cents', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['cart_id'], ['carts.id'], name=op.f('fk_cart_items_cart_id_carts')),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], name=op.f('fk_cart_items_product_id_products')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_cart_items')),
        sa.UniqueConstraint('cart_id', 'product_id', name='uq_cart_items_cart_product'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('cart_items', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_cart_items_cart_id'), ['cart_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_cart_items_product_id'), ['product_id'], unique=False)

    # ==========================================================================
    # 6. ORDERS + DOCUMENT SEQUENCES
    # ==========================================================================
    op.create_table('orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('ordered_by_id', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(length=32), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('total_price_cents', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], name=op.f('fk_orders_team_id_teams')),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], name=op.f('fk_orders_store_id_stores')),
        sa.ForeignKeyConstraint(['ordered_by_id'], ['users.id'], name=op.f('fk_orders_ordered_by_id_users')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_orders')),
        sa.UniqueConstraint('store_id', 'order_number', name='uq_orders_store_number'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('orders', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_orders_team_id'), ['team_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_store_id'), ['store_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_ordered_by_id'), ['ordered_by_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_order_number'), ['order_number'], unique=False)
        batch_op.create_index('ix_orders_team_store', ['team_id', 'store_id'], unique=False)

    op.create_table('document_sequences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('document_type', sa.String(length=32), nullable=False),
        sa.Column('next_number', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], name=op.f('fk_document_sequences_store_id_stores')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_document_sequences')),
        sa.UniqueConstraint('store_id', 'document_type', name='uq_doc_sequences_store_type'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('document_sequences', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_document_sequences_store_id'), ['store_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_document_sequences_document_type'), ['document_type'], unique=False)

    # ==========================================================================
    # 7. REPORTS + GRAPHICS
    # ==========================================================================
    for table in ('reports', 'graphics'):
        op.create_table(table,
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=100), nullable=False),
            sa.Column('description', sa.String(length=500), nullable=True),
            sa.Column('team_id', sa.Integer(), nullable=False),
            sa.Column('store_id', sa.Integer(), nullable=False),
            sa.Column('generated_by_id', sa.Integer(), nullable=False),
            sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
            *_timestamps(),
            sa.ForeignKeyConstraint(['team_id'], ['teams.id'], name=f'fk_{table}_team_id_teams'),
            sa.ForeignKeyConstraint(['store_id'], ['stores.id'], name=f'fk_{table}_store_id_stores'),
            sa.ForeignKeyConstraint(['generated_by_id'], ['users.id'], name=f'fk_{table}_generated_by_id_users'),
            sa.PrimaryKeyConstraint('id', name=f'pk_{table}'),
            sqlite_autoincrement=True
        )
        with op.batch_alter_table(table, schema=None) as batch_op:
            batch_op.create_index(f'ix_{table}_team_store', ['team_id', 'store_id'], unique=False)

    op.create_table('report_orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('report_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['report_id'], ['reports.id'], name=op.f('fk_report_orders_report_id_reports')),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], name=op.f('fk_report_orders_order_id_orders')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_report_orders')),
        sa.UniqueConstraint('report_id', 'order_id', name='uq_report_orders'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('report_orders', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_report_orders_report_id'), ['report_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_report_orders_order_id'), ['order_id'], unique=False)

    op.create_table('graphic_histories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('graphic_id', sa.Integer(), nullable=False),
        sa.Column('history_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['graphic_id'], ['graphics.id'], name=op.f('fk_graphic_histories_graphic_id_graphics')),
        sa.ForeignKeyConstraint(['history_id'], ['histories.id'], name=op.f('fk_graphic_histories_history_id_histories')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_graphic_histories')),
        sa.UniqueConstraint('graphic_id', 'history_id', name='uq_graphic_histories'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('graphic_histories', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_graphic_histories_graphic_id'), ['graphic_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_graphic_histories_history_id'), ['history_id'], unique=False)


def downgrade():
    for table in (
        'graphic_histories',
        'report_orders',
        'graphics',
        'reports',
        'document_sequences',
        'orders',
        'cart_items',
        'carts',
        'histories',
        'products',
        'stores',
        'session_tokens',
    ):
        op.drop_table(table)

    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.drop_constraint(batch_op.f('fk_users_team_id_teams'), type_='foreignkey')
    op.drop_table('teams')
    op.drop_table('users')
