"""Create products and reviews tables

Revision ID: 4e7a91c2d0b3
Revises:
Create Date: 2026-10-19 09:12:44.108215

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4e7a91c2d0b3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'products',
        sa.Column('product_id', sa.BigInteger(), sa.Identity(), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.Text(), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('average_rating', sa.Numeric(3, 2), server_default=sa.text('0.00'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('version', sa.Integer(), server_default=sa.text('1'), nullable=False),
    )
    op.create_index('idx_products_category', 'products', ['category'])

    op.create_table(
        'reviews',
        sa.Column('review_id', sa.BigInteger(), sa.Identity(), primary_key=True),
        sa.Column(
            'product_id',
            sa.BigInteger(),
            sa.ForeignKey('products.product_id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('author', sa.Text(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review_text', sa.Text(), nullable=False),
        sa.Column('helpful_count', sa.Integer(), server_default=sa.text('0'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('version', sa.Integer(), server_default=sa.text('1'), nullable=False),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_reviews_rating_range'),
    )
    op.create_index('idx_reviews_product_id', 'reviews', ['product_id'])

    # GIN indexes matching the to_tsvector('simple', ...) list predicates
    for table, column in (
        ('products', 'name'),
        ('products', 'category'),
        ('products', 'description'),
        ('reviews', 'author'),
        ('reviews', 'review_text'),
    ):
        op.create_index(
            f'idx_{table}_{column}_fts',
            table,
            [sa.text(f"to_tsvector('simple', {column})")],
            postgresql_using='gin',
        )


def downgrade() -> None:
    """Downgrade schema."""
    for table, column in (
        ('reviews', 'review_text'),
        ('reviews', 'author'),
        ('products', 'description'),
        ('products', 'category'),
        ('products', 'name'),
    ):
        op.drop_index(f'idx_{table}_{column}_fts', table_name=table)
    op.drop_index('idx_reviews_product_id', table_name='reviews')
    op.drop_table('reviews')
    op.drop_index('idx_products_category', table_name='products')
    op.drop_table('products')
