# controle_frete/domain/enums.py
# Closed enumerations for freight document types and delivery status.

from enum import Enum
from typing import Optional, Union


class TipoNf(str, Enum):
    """Classificação da nota fiscal do frete."""
    ENVIO = "ENVIO"
    CANCELADA = "CANCELADA"
    REMESSA_AMOSTRA = "REMESSA_AMOSTRA"
    SIMPLES_REMESSA = "SIMPLES_REMESSA"
    DEVOLUCAO = "DEVOLUCAO"

    @property
    def label(self) -> str:
        return TIPO_NF_LABELS[self]

    @classmethod
    def parse(cls, value: Union["TipoNf", str, None]) -> Union["TipoNf", str]:
        """
        Normaliza o valor recebido. Ausente/vazio vira ENVIO; valores conhecidos viram
        o membro do enum; valores desconhecidos (legado) são devolvidos como string.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.ENVIO
        text = str(value).strip().upper()
        if not text:
            return cls.ENVIO
        try:
            return cls(text)
        except ValueError:
            return text


TIPO_NF_LABELS = {
    TipoNf.ENVIO: "Envio",
    TipoNf.CANCELADA: "Cancelada",
    TipoNf.REMESSA_AMOSTRA: "Remessa de Amostra",
    TipoNf.SIMPLES_REMESSA: "Simples Remessa",
    TipoNf.DEVOLUCAO: "Devolução",
}

# Tipos que acompanham status de entrega
STATUS_BEARING_TYPES = frozenset({TipoNf.ENVIO, TipoNf.SIMPLES_REMESSA, TipoNf.REMESSA_AMOSTRA})


class StatusFrete(str, Enum):
    EM_TRANSITO = "EM_TRANSITO"
    ENTREGUE = "ENTREGUE"

    @property
    def label(self) -> str:
        return "Entregue" if self is StatusFrete.ENTREGUE else "Em Trânsito"

    @classmethod
    def parse(cls, value: Union["StatusFrete", str, None]) -> Optional["StatusFrete"]:
        """Converte para o enum; None/vazio resulta em None. Raises ValueError se desconhecido."""
        if value is None or isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        if not text:
            return None
        return cls(text)


# Valor sintético de filtro: notas atrasadas (não persistido)
FORA_DO_PRAZO = "FORA_DO_PRAZO"
