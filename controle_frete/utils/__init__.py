# controle_frete/utils/__init__.py
# Makes 'utils' a package. Exports utility functions/classes.

from .logger import logger, configure_logger
from .data_conversion import (
    SENTINEL_NAO_INFORMADO,
    parse_optional_date,
    parse_non_negative_decimal,
    parse_year_month,
    text_or_sentinel,
    required_text,
)

__all__ = [
    "logger",
    "configure_logger",
    "SENTINEL_NAO_INFORMADO",
    "parse_optional_date",
    "parse_non_negative_decimal",
    "parse_year_month",
    "text_or_sentinel",
    "required_text",
]
