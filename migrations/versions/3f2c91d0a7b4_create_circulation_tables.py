"""Create book, loan and reservation tables

Revision ID: 3f2c91d0a7b4
Revises: 
Create Date: 2026-10-19 09:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2c91d0a7b4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('book',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('isbn', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('author', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('publication_date', sa.Date(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('total_copies', sa.Integer(), nullable=False),
        sa.Column('available_copies', sa.Integer(), nullable=False),
        sa.Column('withdrawn_on_loan', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('total_copies >= 0', name='ck_book_total_copies_non_negative'),
        sa.CheckConstraint('available_copies >= 0', name='ck_book_available_copies_non_negative'),
        sa.CheckConstraint('available_copies <= total_copies', name='ck_book_available_within_total'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('isbn')
    )
    op.create_index('idx_book_title', 'book', ['title'])
    op.create_index('idx_book_category', 'book', ['category'])

    op.create_table('loan',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('book_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('loan_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('return_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('fine_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('renewals', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('state', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['book_id'], ['book.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_loan_book_state', 'loan', ['book_id', 'state'])
    op.create_index('idx_loan_user_state', 'loan', ['user_id', 'state'])

    op.create_table('reservation',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('book_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('reservation_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expiration_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('state', sa.String(length=20), nullable=False),
        sa.Column('loan_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['book_id'], ['book.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['loan_id'], ['loan.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_reservation_user_state', 'reservation', ['user_id', 'state'])
    op.create_index('idx_reservation_book_state', 'reservation', ['book_id', 'state'])


def downgrade() -> None:
    op.drop_index('idx_reservation_book_state', table_name='reservation')
    op.drop_index('idx_reservation_user_state', table_name='reservation')
    op.drop_table('reservation')
    op.drop_index('idx_loan_user_state', table_name='loan')
    op.drop_index('idx_loan_book_state', table_name='loan')
    op.drop_table('loan')
    op.drop_index('idx_book_category', table_name='book')
    op.drop_index('idx_book_title', table_name='book')
    op.drop_table('book')
