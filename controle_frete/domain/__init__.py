# controle_frete/domain/__init__.py
# Makes 'domain' a package. Exports ORM models, enumerations and value objects.

from .enums import TipoNf, StatusFrete, STATUS_BEARING_TYPES, FORA_DO_PRAZO
from .observacao import (
    Observacao,
    parse_observacoes,
    serialize_observacoes,
    add_observacao,
    remove_observacao,
)
from .frete import Frete
from .preco import Preco

__all__ = [
    "TipoNf", "StatusFrete", "STATUS_BEARING_TYPES", "FORA_DO_PRAZO",
    "Observacao", "parse_observacoes", "serialize_observacoes", "add_observacao", "remove_observacao",
    "Frete",
    "Preco",
]
