"""initial KM dashboard schema

Revision ID: km001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the complete schema from scratch:
- users / session_tokens: role-based accounts and hashed bearer sessions
- suppliers / materials / supplier_deliveries: inventory + KBV vendor data
- lessons_learned / knowledge_documents: SECI knowledge capture
- production_logs / production_wastes: Lean KM inputs
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'km001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # users: dashboard accounts (role is the only authorization axis)
    # ============================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='staff'),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('position', sa.String(length=255), nullable=True),
        sa.Column('department', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_is_active', 'users', ['is_active'])

    op.create_table(
        'session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_used_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_session_tokens_user_id', 'session_tokens', ['user_id'])
    op.create_index('ix_session_tokens_token_hash', 'session_tokens', ['token_hash'], unique=True)

    # ============================================================================
    # suppliers: KBV vendor ratings (overall score is derived, never stored)
    # ============================================================================
    op.create_table(
        'suppliers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('specialty', sa.String(length=255), nullable=False),
        sa.Column('quality_score', sa.Numeric(3, 1), nullable=False, server_default='7.0'),
        sa.Column('speed_score', sa.Numeric(3, 1), nullable=False, server_default='7.0'),
        sa.Column('reliability_score', sa.Numeric(3, 1), nullable=False, server_default='7.0'),
        sa.Column('is_recommended', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('kbv_insight', sa.Text(), nullable=True),
        sa.Column('contact_person', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('total_orders', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('on_time_deliveries', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_delivery_date', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.Column('updated_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['updated_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_suppliers_name', 'suppliers', ['name'])
    op.create_index('ix_suppliers_is_active', 'suppliers', ['is_active'])
    op.create_index('ix_suppliers_active_recommended', 'suppliers', ['is_active', 'is_recommended'])

    # ============================================================================
    # materials: stock + explicit/tacit knowledge (status is derived)
    # ============================================================================
    op.create_table(
        'materials',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('stock_quantity', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('unit', sa.String(length=20), nullable=False),
        sa.Column('threshold_min', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('price_per_unit', sa.Numeric(14, 2), nullable=True),
        sa.Column('reorder_point', sa.Numeric(12, 2), nullable=True),
        sa.Column('explicit_knowledge', sa.Text(), nullable=True),
        sa.Column('tacit_knowledge', sa.Text(), nullable=True),
        sa.Column('supplier_id', sa.Integer(), nullable=True),
        sa.Column('avg_waste_percentage', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('last_updated_by_user_id', sa.Integer(), nullable=True),
        sa.Column('last_restocked_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['supplier_id'], ['suppliers.id'], ),
        sa.ForeignKeyConstraint(['last_updated_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_materials_category', 'materials', ['category'])
    op.create_index('ix_materials_supplier_id', 'materials', ['supplier_id'])
    op.create_index('ix_materials_is_active', 'materials', ['is_active'])
    op.create_index('ix_materials_stock_threshold', 'materials', ['stock_quantity', 'threshold_min'])

    op.create_table(
        'supplier_deliveries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('supplier_id', sa.Integer(), nullable=False),
        sa.Column('material_id', sa.Integer(), nullable=True),
        sa.Column('po_number', sa.String(length=64), nullable=False),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('expected_delivery_date', sa.Date(), nullable=False),
        sa.Column('actual_delivery_date', sa.Date(), nullable=True),
        sa.Column('quantity_ordered', sa.Numeric(12, 2), nullable=False),
        sa.Column('quantity_delivered', sa.Numeric(12, 2), nullable=True),
        sa.Column('unit', sa.String(length=20), nullable=True),
        sa.Column('price_per_unit', sa.Numeric(14, 2), nullable=True),
        sa.Column('color_consistency', sa.String(length=16), nullable=True),
        sa.Column('material_quality', sa.String(length=16), nullable=True),
        sa.Column('defect_rate', sa.Numeric(5, 2), nullable=True),
        sa.Column('quality_notes', sa.Text(), nullable=True),
        sa.Column('delivery_notes', sa.Text(), nullable=True),
        sa.Column('on_time_delivery', sa.Boolean(), nullable=True),
        sa.Column('delay_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Ordered'),
        sa.Column('received_by_user_id', sa.Integer(), nullable=True),
        sa.Column('inspected_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['supplier_id'], ['suppliers.id'], ),
        sa.ForeignKeyConstraint(['material_id'], ['materials.id'], ),
        sa.ForeignKeyConstraint(['received_by_user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['inspected_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('po_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_supplier_deliveries_supplier_id', 'supplier_deliveries', ['supplier_id'])
    op.create_index('ix_supplier_deliveries_material_id', 'supplier_deliveries', ['material_id'])
    op.create_index('ix_supplier_deliveries_order_date', 'supplier_deliveries', ['order_date'])
    op.create_index('ix_supplier_deliveries_status', 'supplier_deliveries', ['status'])
    op.create_index('ix_supplier_deliveries_supplier_order', 'supplier_deliveries', ['supplier_id', 'order_date'])

    # ============================================================================
    # knowledge: lessons learned (SECI) + knowledge base documents
    # ============================================================================
    op.create_table(
        'lessons_learned',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('seci_type', sa.String(length=16), nullable=False),
        sa.Column('category', sa.String(length=255), nullable=True),
        sa.Column('problem_description', sa.Text(), nullable=False),
        sa.Column('solution', sa.Text(), nullable=False),
        sa.Column('recommendation', sa.Text(), nullable=True),
        sa.Column('impact_level', sa.String(length=8), nullable=False, server_default='Sedang'),
        sa.Column('estimated_savings', sa.Numeric(14, 2), nullable=True),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('validated_by_user_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Published'),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('likes_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('material_id', sa.Integer(), nullable=True),
        sa.Column('supplier_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['validated_by_user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['material_id'], ['materials.id'], ),
        sa.ForeignKeyConstraint(['supplier_id'], ['suppliers.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_lessons_learned_seci_type', 'lessons_learned', ['seci_type'])
    op.create_index('ix_lessons_status_created', 'lessons_learned', ['status', 'created_at'])

    op.create_table(
        'knowledge_documents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('doc_type', sa.String(length=16), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=255), nullable=True),
        sa.Column('seci_stage', sa.String(length=16), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Draft'),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_by_user_id', sa.Integer(), nullable=False),
        sa.Column('updated_by_user_id', sa.Integer(), nullable=True),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['updated_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_knowledge_documents_type_status', 'knowledge_documents', ['doc_type', 'status'])

    # ============================================================================
    # production: daily usage logs + waste incidents (Lean KM)
    # ============================================================================
    op.create_table(
        'production_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('production_date', sa.Date(), nullable=False),
        sa.Column('shift', sa.String(length=16), nullable=True),
        sa.Column('material_id', sa.Integer(), nullable=False),
        sa.Column('quantity_used', sa.Numeric(12, 2), nullable=False),
        sa.Column('product_type', sa.String(length=64), nullable=False),
        sa.Column('quantity_produced', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('waste_quantity', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('waste_percentage', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('waste_reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tacit_insight', sa.Text(), nullable=True),
        sa.Column('worker_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['material_id'], ['materials.id'], ),
        sa.ForeignKeyConstraint(['worker_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_production_logs_production_date', 'production_logs', ['production_date'])
    op.create_index('ix_production_logs_material_id', 'production_logs', ['material_id'])
    op.create_index('ix_production_logs_date_material', 'production_logs', ['production_date', 'material_id'])

    op.create_table(
        'production_wastes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('material_id', sa.Integer(), nullable=False),
        sa.Column('production_log_id', sa.Integer(), nullable=True),
        sa.Column('waste_date', sa.Date(), nullable=False),
        sa.Column('quantity', sa.Numeric(12, 2), nullable=False),
        sa.Column('unit', sa.String(length=20), nullable=True),
        sa.Column('waste_category', sa.String(length=32), nullable=False),
        sa.Column('waste_reason', sa.Text(), nullable=False),
        sa.Column('preventive_action', sa.Text(), nullable=True),
        sa.Column('is_preventable', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('cost_impact', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('lesson_learned', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Recorded'),
        sa.Column('recorded_by_user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['material_id'], ['materials.id'], ),
        sa.ForeignKeyConstraint(['production_log_id'], ['production_logs.id'], ),
        sa.ForeignKeyConstraint(['recorded_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_production_wastes_waste_date', 'production_wastes', ['waste_date'])
    op.create_index('ix_production_wastes_waste_category', 'production_wastes', ['waste_category'])
    op.create_index('ix_production_wastes_is_preventable', 'production_wastes', ['is_preventable'])
    op.create_index('ix_production_wastes_material_date', 'production_wastes', ['material_id', 'waste_date'])


def downgrade():
    """Drop all tables (destructive operation)."""
    op.drop_table('production_wastes')
    op.drop_table('production_logs')
    op.drop_table('knowledge_documents')
    op.drop_table('lessons_learned')
    op.drop_table('supplier_deliveries')
    op.drop_table('materials')
    op.drop_table('suppliers')
    op.drop_table('session_tokens')
    op.drop_table('users')
