"""Create book table

Revision ID: 0001
Revises:
Create Date: 2023-03-12 18:41:07.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'book',
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('author', sa.String(), nullable=False),
        sa.Column('isbn', sa.String(), nullable=False),
    )
    op.create_index('book_isbn_idx', 'book', ['isbn'], unique=True)


def downgrade() -> None:
    op.drop_index('book_isbn_idx', table_name='book')
    op.drop_table('book')
