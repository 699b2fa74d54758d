# alembic/versions/3f1a9c2d7b10_create_controle_frete_and_precos.py
"""Create controle_frete and precos tables

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2025-06-02 10:12:44.518309

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'controle_frete',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('numero_nf', sa.Text(), nullable=False),
        sa.Column('data_emissao', sa.Date(), nullable=False),
        sa.Column('documento', sa.Text(), nullable=False),
        sa.Column('valor_nf', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('tipo_nf', sa.String(length=30), nullable=False),
        sa.Column('nome_orgao', sa.Text(), nullable=False),
        sa.Column('contato_orgao', sa.Text(), nullable=False),
        sa.Column('vendedor', sa.Text(), nullable=False),
        sa.Column('transportadora', sa.Text(), nullable=False),
        sa.Column('valor_frete', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('data_coleta', sa.Date(), nullable=False),
        sa.Column('cidade_destino', sa.Text(), nullable=False),
        sa.Column('previsao_entrega', sa.Date(), nullable=True),
        sa.Column('data_entrega', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('observacoes', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_controle_frete')),
    )
    op.create_index(op.f('ix_controle_frete_numero_nf'), 'controle_frete', ['numero_nf'], unique=False)
    op.create_index(op.f('ix_controle_frete_data_emissao'), 'controle_frete', ['data_emissao'], unique=False)
    op.create_index(op.f('ix_controle_frete_status'), 'controle_frete', ['status'], unique=False)

    op.create_table(
        'precos',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('marca', sa.Text(), nullable=False),
        sa.Column('codigo', sa.Text(), nullable=False),
        sa.Column('preco', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('descricao', sa.Text(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_precos')),
    )
    op.create_index(op.f('ix_precos_marca'), 'precos', ['marca'], unique=False)
    op.create_index(op.f('ix_precos_codigo'), 'precos', ['codigo'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_precos_codigo'), table_name='precos')
    op.drop_index(op.f('ix_precos_marca'), table_name='precos')
    op.drop_table('precos')

    op.drop_index(op.f('ix_controle_frete_status'), table_name='controle_frete')
    op.drop_index(op.f('ix_controle_frete_data_emissao'), table_name='controle_frete')
    op.drop_index(op.f('ix_controle_frete_numero_nf'), table_name='controle_frete')
    op.drop_table('controle_frete')
