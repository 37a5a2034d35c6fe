"""tag and entity_tag

Revision ID: 4f1c2a9d7e10
Revises:
Create Date: 2026-10-18 09:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from tagserver.common.settings import get_settings

# revision identifiers, used by Alembic.
revision: str = '4f1c2a9d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_schema = get_settings().db_schema
SCHEMA = _schema if _schema and _schema.lower() != "public" else None

IdType = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        'tag',
        sa.Column('id', IdType, autoincrement=True, nullable=False),
        sa.Column('date_created', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('data_origin', sa.Text(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tag')),
        sa.UniqueConstraint('name', name='uq_tag_name'),
        schema=SCHEMA,
        sqlite_autoincrement=True,
    )
    op.create_table(
        'entity_tag',
        sa.Column('id', IdType, autoincrement=True, nullable=False),
        sa.Column('date_created', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('data_origin', sa.Text(), nullable=True),
        sa.Column('entity_id', sa.BigInteger(), nullable=False),
        sa.Column('tag_id', IdType, nullable=False),
        sa.ForeignKeyConstraint(['tag_id'], [f'{SCHEMA}.tag.id' if SCHEMA else 'tag.id'],
                                name=op.f('fk_entity_tag_tag_id_tag'), ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_entity_tag')),
        sa.UniqueConstraint('entity_id', 'tag_id', name='uq_entity_tag_entity_tag'),
        schema=SCHEMA,
        sqlite_autoincrement=True,
    )
    op.create_index('ix_entity_tag_entity_id', 'entity_tag', ['entity_id'], unique=False, schema=SCHEMA)


def downgrade() -> None:
    op.drop_index('ix_entity_tag_entity_id', table_name='entity_tag', schema=SCHEMA)
    op.drop_table('entity_tag', schema=SCHEMA)
    op.drop_table('tag', schema=SCHEMA)
