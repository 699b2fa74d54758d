# controle_frete/services/frete_views.py
# Visões sobre a coleção de fretes: filtros da tabela, painel do mês,
# totais mensais (gráfico) e opções dos filtros.

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from controle_frete.domain.enums import TipoNf, StatusFrete, FORA_DO_PRAZO
from controle_frete.services.frete_status import is_late, is_status_bearing, normalize_tipo_nf, record_field, as_date

MESES = [
    'Janeiro', 'Fevereiro', 'Março', 'Abril', 'Maio', 'Junho',
    'Julho', 'Agosto', 'Setembro', 'Outubro', 'Novembro', 'Dezembro'
]
MESES_ABREV = ['JAN', 'FEV', 'MAR', 'ABR', 'MAI', 'JUN', 'JUL', 'AGO', 'SET', 'OUT', 'NOV', 'DEZ']

SEARCH_FIELDS = (
    'numero_nf', 'transportadora', 'nome_orgao', 'cidade_destino',
    'vendedor', 'documento', 'contato_orgao',
)


@dataclass(frozen=True)
class FreteFilters:
    search: str = ''
    transportadora: str = ''
    vendedor: str = ''
    status: str = ''


def month_start(value: date) -> date:
    return date(value.year, value.month, 1)


def shift_month(month: date, delta: int) -> date:
    index = month.year * 12 + (month.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


def _in_month(record: Any, month: date) -> bool:
    emissao = as_date(record_field(record, 'data_emissao'))
    return emissao is not None and emissao.year == month.year and emissao.month == month.month


def _is_envio(record: Any) -> bool:
    return normalize_tipo_nf(record_field(record, 'tipo_nf')) == TipoNf.ENVIO


def _amount(value: Any) -> Decimal:
    if value is None or value == '':
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def _numero_key(record: Any) -> int:
    digits = ''
    for ch in str(record_field(record, 'numero_nf') or '').strip():
        if ch.isdigit():
            digits += ch
        else:
            break
    return int(digits) if digits else 0


def _status_of(record: Any) -> Optional[str]:
    status = record_field(record, 'status')
    return status.value if isinstance(status, StatusFrete) else status


def filter_fretes(records: Iterable[Any], month: date, filters: FreteFilters, today: date) -> List[Any]:
    """
    Aplica os filtros da tabela de fretes.

    Com status = FORA_DO_PRAZO o filtro de mês é ignorado: lista todos os atrasados.
    O resultado é ordenado pelo número da NF (parte numérica inicial; 0 se não houver).
    """
    filtered = list(records)

    if filters.status == FORA_DO_PRAZO:
        filtered = [f for f in filtered if is_late(f, today)]
    else:
        filtered = [f for f in filtered if _in_month(f, month)]
        if filters.status:
            filtered = [f for f in filtered if _status_of(f) == filters.status]

    if filters.transportadora:
        filtered = [f for f in filtered if record_field(f, 'transportadora') == filters.transportadora]

    if filters.vendedor:
        filtered = [f for f in filtered if record_field(f, 'vendedor') == filters.vendedor]

    if filters.search:
        term = filters.search.lower()
        filtered = [
            f for f in filtered
            if any(term in str(record_field(f, name)).lower() for name in SEARCH_FIELDS if record_field(f, name))
        ]

    filtered.sort(key=_numero_key)
    return filtered


def dashboard(records: Iterable[Any], month: date, today: date) -> Dict[str, Any]:
    """Contadores do mês (tipos com status) e valores totais dos envios do mês."""
    do_mes = [f for f in records if _in_month(f, month)]
    com_status = [f for f in do_mes if is_status_bearing(record_field(f, 'tipo_nf'))]
    envios = [f for f in do_mes if _is_envio(f)]

    valor_total = sum((_amount(record_field(f, 'valor_nf')) for f in envios), Decimal("0"))
    frete_total = sum((_amount(record_field(f, 'valor_frete')) for f in envios), Decimal("0"))

    return {
        'mes': month.strftime('%Y-%m'),
        'mes_nome': f"{MESES[month.month - 1]} {month.year}",
        'entregues': sum(1 for f in com_status if _status_of(f) == StatusFrete.ENTREGUE.value),
        'em_transito': sum(1 for f in com_status if _status_of(f) == StatusFrete.EM_TRANSITO.value),
        'fora_do_prazo': sum(1 for f in com_status if is_late(f, today)),
        'valor_total': float(valor_total),
        'frete_total': float(frete_total),
    }


def monthly_totals(records: Iterable[Any], year: int) -> Dict[str, Any]:
    """Totais de frete e valor de NF por mês do ano (apenas envios)."""
    envios = [f for f in records if _is_envio(f)]
    meses = []
    for i in range(12):
        do_mes = [f for f in envios if _in_month(f, date(year, i + 1, 1))]
        meses.append({
            'mes': MESES[i],
            'mes_abrev': MESES_ABREV[i],
            'frete': float(sum((_amount(record_field(f, 'valor_frete')) for f in do_mes), Decimal("0"))),
            'valor': float(sum((_amount(record_field(f, 'valor_nf')) for f in do_mes), Decimal("0"))),
        })
    return {
        'ano': year,
        'meses': meses,
        'total_frete': sum(m['frete'] for m in meses),
        'total_valor': sum(m['valor'] for m in meses),
    }


def filter_options(records: Iterable[Any], today: date) -> Dict[str, List[str]]:
    records = list(records)
    transportadoras = sorted({str(record_field(f, 'transportadora')).strip() for f in records
                              if record_field(f, 'transportadora') and str(record_field(f, 'transportadora')).strip()})
    vendedores = sorted({str(record_field(f, 'vendedor')).strip() for f in records
                         if record_field(f, 'vendedor') and str(record_field(f, 'vendedor')).strip()})
    status = sorted({_status_of(f).strip() for f in records if _status_of(f) and _status_of(f).strip()})
    if any(is_late(f, today) for f in records):
        status.insert(0, FORA_DO_PRAZO)
    return {'transportadoras': transportadoras, 'vendedores': vendedores, 'status': status}
