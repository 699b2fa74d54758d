# controle_frete/domain/observacao.py
# Observações de um frete: lista ordenada serializada em um único campo JSON.

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional, Union

from controle_frete.utils.logger import logger


@dataclass(frozen=True)
class Observacao:
    """Uma entrada de observação. Imutável; a lista só cresce no fim ou perde itens por posição."""
    texto: str
    timestamp: str
    username: Optional[str] = None
    # Entrada gravada que não pôde ser lida; devolvida intacta por to_dict
    raw: Any = field(default=None, compare=False, repr=False)

    @property
    def legivel(self) -> bool:
        return self.raw is None

    def to_dict(self) -> Any:
        if not self.legivel:
            return self.raw
        data = {'texto': self.texto, 'timestamp': self.timestamp}
        if self.username:
            data['username'] = self.username
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Observacao':
        if not isinstance(data, dict):
            raise ValueError("Observação deve ser um objeto JSON.")
        texto = data.get('texto')
        if texto is None or not str(texto).strip():
            raise ValueError("Observação sem texto.")
        return cls(
            texto=str(texto),
            timestamp=str(data.get('timestamp') or ''),
            username=data.get('username') or None,
        )


def _decode_list(value: Union[str, List[Any], None]) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Campo observacoes não é um JSON válido: {e}") from e
    if not isinstance(value, list):
        raise ValueError("Campo observacoes deve ser uma lista.")
    return value


def parse_observacoes(value: Union[str, List[Any], None]) -> List[Observacao]:
    """
    Lê o campo observacoes (string JSON ou lista já decodificada).

    Raises:
        ValueError: JSON inválido ou entradas malformadas.
    """
    return [Observacao.from_dict(item) for item in _decode_list(value)]


def load_observacoes_lenient(value: Union[str, List[Any], None]) -> List[Observacao]:
    """
    Leitura tolerante para exibição. Entradas ilegíveis ficam na lista, na mesma posição,
    com o conteúdo original em `raw`; só um campo que nem é uma lista JSON vira lista vazia.
    """
    try:
        items = _decode_list(value)
    except ValueError as e:
        logger.error(f"Erro ao parsear observações: {e}")
        return []
    observacoes = []
    for position, item in enumerate(items):
        try:
            observacoes.append(Observacao.from_dict(item))
        except ValueError as e:
            logger.warning(f"Observação {position} ilegível mantida como está: {e}")
            observacoes.append(Observacao(texto='', timestamp='', raw=item))
    return observacoes


def serialize_observacoes(observacoes: List[Observacao]) -> str:
    return json.dumps([obs.to_dict() for obs in observacoes], ensure_ascii=False)


def add_observacao(observacoes: List[Observacao], texto: str, username: Optional[str] = None,
                   now: Optional[datetime] = None) -> List[Observacao]:
    """Retorna uma nova lista com a observação anexada ao final."""
    texto = (texto or '').strip()
    if not texto:
        raise ValueError("Digite uma observação primeiro")
    moment = now or datetime.now(timezone.utc)
    entry = Observacao(
        texto=texto,
        timestamp=moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
        username=username or 'Usuário',
    )
    return [*observacoes, entry]


def remove_observacao(observacoes: List[Observacao], index: int) -> List[Observacao]:
    """Retorna uma nova lista sem o item da posição informada."""
    if index < 0 or index >= len(observacoes):
        raise IndexError(f"Índice de observação fora do intervalo: {index}")
    return observacoes[:index] + observacoes[index + 1:]
