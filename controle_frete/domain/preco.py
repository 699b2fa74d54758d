# controle_frete/domain/preco.py
# Define o modelo ORM da tabela de preços.

from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy import Integer, Text, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from controle_frete.database.base import Base
from controle_frete.utils.data_conversion import iso_or_none, decimal_to_float


class Preco(Base):
    """Entrada da lista de preços (marca, código, preço, descrição)."""
    __tablename__ = 'precos'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    marca: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    # Único por marca apenas por convenção; não há constraint no banco
    codigo: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    preco: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    descricao: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'marca': self.marca,
            'codigo': self.codigo,
            'preco': decimal_to_float(self.preco),
            'descricao': self.descricao,
            'timestamp': iso_or_none(self.timestamp),
        }

    def __repr__(self):
        return f"<Preco(id={self.id}, marca='{self.marca}', codigo='{self.codigo}')>"
