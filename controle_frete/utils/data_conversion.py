# controle_frete/utils/data_conversion.py
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from .logger import logger

SENTINEL_NAO_INFORMADO = "NÃO INFORMADO"


def parse_optional_date(value: Any) -> Optional[date]:
    """
    Converte um valor (YYYY-MM-DD, ISO 8601 completo, date ou datetime) para date.
    Strings vazias e None resultam em None.

    Raises:
        ValueError: Se o valor não puder ser interpretado como data.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Tipo inválido para data: {type(value).__name__}")
    value = value.strip()
    if not value:
        return None
    date_str = value.split('T')[0]
    try:
        return date.fromisoformat(date_str)
    except ValueError as e:
        logger.debug(f"Não foi possível converter '{value}' para date: {e}")
        raise ValueError(f"Data inválida: '{value}'") from e


def parse_non_negative_decimal(value: Any, default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    """
    Converte valores monetários (número ou string, aceitando vírgula decimal) para Decimal.

    Raises:
        ValueError: Valor não numérico ou negativo.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        raise ValueError("Valor monetário inválido.")
    try:
        if isinstance(value, str):
            value = value.strip().replace(',', '.')
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Valor monetário inválido: '{value}'") from e
    if not amount.is_finite():
        raise ValueError(f"Valor monetário inválido: '{value}'")
    if amount < 0:
        raise ValueError(f"Valor monetário não pode ser negativo: '{value}'")
    return amount


def text_or_sentinel(value: Any) -> str:
    """Retorna o texto sem espaços extras ou 'NÃO INFORMADO' quando vazio."""
    if value is None:
        return SENTINEL_NAO_INFORMADO
    text = str(value).strip()
    return text if text else SENTINEL_NAO_INFORMADO


def required_text(value: Any) -> Optional[str]:
    """Retorna o texto sem espaços extras, ou None se vazio."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def iso_or_none(value: Optional[Union[date, datetime]]) -> Optional[str]:
    return value.isoformat() if value else None


def decimal_to_float(value: Optional[Decimal]) -> float:
    return float(value) if value is not None else 0.0


def parse_year_month(value: Optional[str]) -> Optional[date]:
    """Converte 'YYYY-MM' no primeiro dia do mês. None se vazio; ValueError se inválido."""
    if not value:
        return None
    try:
        year_str, month_str = value.strip().split('-')[:2]
        return date(int(year_str), int(month_str), 1)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Mês inválido: '{value}'. Use o formato YYYY-MM.") from e
