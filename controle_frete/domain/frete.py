# controle_frete/domain/frete.py
# Define o modelo ORM do frete (tabela controle_frete) usando SQLAlchemy.

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional, Dict, Any

from sqlalchemy import Integer, String, Text, Date, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from controle_frete.database.base import Base
from controle_frete.domain.enums import TipoNf
from controle_frete.utils.data_conversion import iso_or_none, decimal_to_float, SENTINEL_NAO_INFORMADO


class Frete(Base):
    """
    Representa um frete (nota fiscal em transporte) como modelo ORM.
    O campo status é derivado de tipo_nf e data_entrega pelas regras em services.frete_status.
    """
    __tablename__ = 'controle_frete'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    numero_nf: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    data_emissao: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    documento: Mapped[str] = mapped_column(Text, nullable=False, default=SENTINEL_NAO_INFORMADO)
    valor_nf: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    # String livre no banco: valores legados fora do enum são preservados
    tipo_nf: Mapped[str] = mapped_column(String(30), nullable=False, default=TipoNf.ENVIO.value)
    nome_orgao: Mapped[str] = mapped_column(Text, nullable=False)
    contato_orgao: Mapped[str] = mapped_column(Text, nullable=False, default=SENTINEL_NAO_INFORMADO)
    vendedor: Mapped[str] = mapped_column(Text, nullable=False, default=SENTINEL_NAO_INFORMADO)
    transportadora: Mapped[str] = mapped_column(Text, nullable=False, default=SENTINEL_NAO_INFORMADO)
    valor_frete: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    data_coleta: Mapped[date] = mapped_column(Date, nullable=False)
    cidade_destino: Mapped[str] = mapped_column(Text, nullable=False, default=SENTINEL_NAO_INFORMADO)
    previsao_entrega: Mapped[Optional[date]] = mapped_column(Date)
    data_entrega: Mapped[Optional[date]] = mapped_column(Date)
    status: Mapped[Optional[str]] = mapped_column(String(20), index=True)
    observacoes: Mapped[str] = mapped_column(Text, nullable=False, default='[]')
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        """Converte o objeto Frete para o formato JSON da API."""
        return {
            'id': self.id,
            'numero_nf': self.numero_nf,
            'data_emissao': iso_or_none(self.data_emissao),
            'documento': self.documento,
            'valor_nf': decimal_to_float(self.valor_nf),
            'tipo_nf': self.tipo_nf,
            'nome_orgao': self.nome_orgao,
            'contato_orgao': self.contato_orgao,
            'vendedor': self.vendedor,
            'transportadora': self.transportadora,
            'valor_frete': decimal_to_float(self.valor_frete),
            'data_coleta': iso_or_none(self.data_coleta),
            'cidade_destino': self.cidade_destino,
            'previsao_entrega': iso_or_none(self.previsao_entrega),
            'data_entrega': iso_or_none(self.data_entrega),
            'status': self.status,
            'observacoes': self.observacoes or '[]',
            'created_at': iso_or_none(self.created_at),
        }

    def __repr__(self):
        return f"<Frete(id={self.id}, nf='{self.numero_nf}', tipo='{self.tipo_nf}', status={self.status})>"
