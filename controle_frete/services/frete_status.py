# controle_frete/services/frete_status.py
# Regras puras de status do frete: derivação do status, alternância (checkbox)
# e classificação de atraso ("fora do prazo"). Usadas pelo servidor e pelo cliente.

from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from controle_frete.domain.enums import TipoNf, StatusFrete, STATUS_BEARING_TYPES
from controle_frete.utils.data_conversion import parse_optional_date

DateLike = Union[date, str, None]


def normalize_tipo_nf(tipo_nf: Union[TipoNf, str, None]) -> Union[TipoNf, str]:
    """Ausente ou vazio vira ENVIO; valores desconhecidos são mantidos como string."""
    return TipoNf.parse(tipo_nf)


def is_status_bearing(tipo_nf: Union[TipoNf, str, None]) -> bool:
    """ENVIO, SIMPLES_REMESSA e REMESSA_AMOSTRA acompanham status; o resto (inclusive legado) não."""
    return normalize_tipo_nf(tipo_nf) in STATUS_BEARING_TYPES


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def derive_status_on_create(tipo_nf: Union[TipoNf, str, None]) -> Optional[StatusFrete]:
    """Status inicial de um frete sem data de entrega: EM_TRANSITO ou None."""
    if not is_status_bearing(tipo_nf):
        return None
    return StatusFrete.EM_TRANSITO


def derive_status_on_update(tipo_nf: Union[TipoNf, str, None], data_entrega: DateLike) -> Optional[StatusFrete]:
    """
    Recalcula o status a partir do tipo e da data de entrega.

    - Tipo sem status -> None
    - data_entrega preenchida -> ENTREGUE
    - caso contrário -> EM_TRANSITO

    Função total: nunca levanta exceção.
    """
    if not is_status_bearing(tipo_nf):
        return None
    if _has_value(data_entrega):
        return StatusFrete.ENTREGUE
    return StatusFrete.EM_TRANSITO


def toggle_status(current_status: Union[StatusFrete, str, None], data_entrega: DateLike,
                  today: date) -> Tuple[StatusFrete, Optional[date]]:
    """
    Alterna entre ENTREGUE e EM_TRANSITO.

    Desmarcar (ENTREGUE -> EM_TRANSITO) limpa data_entrega. Marcar mantém a data
    existente ou usa a data de hoje.
    """
    if _status_value(current_status) == StatusFrete.ENTREGUE.value:
        return StatusFrete.EM_TRANSITO, None
    existing = as_date(data_entrega)
    return StatusFrete.ENTREGUE, existing or today


def _status_value(status: Union[StatusFrete, str, None]) -> Optional[str]:
    if isinstance(status, StatusFrete):
        return status.value
    return status


def record_field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def as_date(value: DateLike) -> Optional[date]:
    try:
        return parse_optional_date(value)
    except ValueError:
        return None


def is_late(record: Any, today: date) -> bool:
    """
    Frete fora do prazo: tipo com status, não entregue, com previsão de entrega
    estritamente anterior a hoje (comparação por dia).
    """
    if not is_status_bearing(record_field(record, 'tipo_nf')):
        return False
    if _status_value(record_field(record, 'status')) == StatusFrete.ENTREGUE.value:
        return False
    previsao = as_date(record_field(record, 'previsao_entrega'))
    if previsao is None:
        return False
    return previsao < today


def late_records(records: Iterable[Any], today: date) -> List[Any]:
    """Fretes atrasados ordenados pela previsão de entrega (mais antiga primeiro, ordenação estável)."""
    late = [r for r in records if is_late(r, today)]
    late.sort(key=lambda r: as_date(record_field(r, 'previsao_entrega')))
    return late
