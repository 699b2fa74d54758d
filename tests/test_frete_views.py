from datetime import date

from controle_frete.domain.enums import FORA_DO_PRAZO
from controle_frete.services.frete_views import (
    FreteFilters, filter_fretes, dashboard, monthly_totals, filter_options, shift_month,
)

TODAY = date(2025, 3, 15)
MARCH = date(2025, 3, 1)


def _frete(id, numero_nf, data_emissao='2025-03-05', **overrides):
    record = {
        'id': id,
        'numero_nf': numero_nf,
        'data_emissao': data_emissao,
        'tipo_nf': 'ENVIO',
        'status': 'EM_TRANSITO',
        'transportadora': 'Jamef',
        'vendedor': 'Roberto',
        'nome_orgao': 'Prefeitura',
        'cidade_destino': 'Campinas',
        'documento': 'NÃO INFORMADO',
        'contato_orgao': 'NÃO INFORMADO',
        'previsao_entrega': None,
        'valor_nf': 100.0,
        'valor_frete': 10.0,
    }
    record.update(overrides)
    return record


RECORDS = [
    _frete(1, '300'),
    _frete(2, '25', status='ENTREGUE', transportadora='Braspress'),
    _frete(3, '1000', previsao_entrega='2025-03-01', cidade_destino='Sorocaba'),
    _frete(4, '7', data_emissao='2025-02-20', previsao_entrega='2025-02-25'),
    _frete(5, '40', tipo_nf='CANCELADA', status=None, valor_nf=999.0, valor_frete=99.0),
    _frete(6, 'ABC', vendedor='Carla'),
]


def test_month_filter_and_numeric_sort():
    visible = filter_fretes(RECORDS, MARCH, FreteFilters(), TODAY)
    assert [f['id'] for f in visible] == [6, 2, 5, 1, 3]


def test_fora_do_prazo_ignores_month():
    visible = filter_fretes(RECORDS, MARCH, FreteFilters(status=FORA_DO_PRAZO), TODAY)
    assert [f['id'] for f in visible] == [4, 3]


def test_status_transportadora_and_vendedor_filters():
    assert [f['id'] for f in filter_fretes(RECORDS, MARCH, FreteFilters(status='ENTREGUE'), TODAY)] == [2]
    assert [f['id'] for f in filter_fretes(RECORDS, MARCH, FreteFilters(transportadora='Braspress'), TODAY)] == [2]
    assert [f['id'] for f in filter_fretes(RECORDS, MARCH, FreteFilters(vendedor='Carla'), TODAY)] == [6]


def test_search_is_case_insensitive_over_text_fields():
    visible = filter_fretes(RECORDS, MARCH, FreteFilters(search='soroc'), TODAY)
    assert [f['id'] for f in visible] == [3]
    visible = filter_fretes(RECORDS, MARCH, FreteFilters(search='100'), TODAY)
    assert [f['id'] for f in visible] == [3]


def test_dashboard_counts_month_and_sums_only_envio():
    painel = dashboard(RECORDS, MARCH, TODAY)
    assert painel['mes'] == '2025-03'
    assert painel['mes_nome'] == 'Março 2025'
    assert painel['entregues'] == 1
    assert painel['em_transito'] == 3
    assert painel['fora_do_prazo'] == 1
    assert painel['valor_total'] == 400.0
    assert painel['frete_total'] == 40.0


def test_monthly_totals_for_year():
    totals = monthly_totals(RECORDS, 2025)
    assert totals['ano'] == 2025
    assert len(totals['meses']) == 12
    assert totals['meses'][1] == {'mes': 'Fevereiro', 'mes_abrev': 'FEV', 'frete': 10.0, 'valor': 100.0}
    assert totals['meses'][2]['frete'] == 40.0
    assert totals['total_frete'] == 50.0
    assert totals['total_valor'] == 500.0
    assert monthly_totals(RECORDS, 2024)['total_frete'] == 0


def test_filter_options_lists_late_first():
    options = filter_options(RECORDS, TODAY)
    assert options['transportadoras'] == ['Braspress', 'Jamef']
    assert options['vendedores'] == ['Carla', 'Roberto']
    assert options['status'] == [FORA_DO_PRAZO, 'EM_TRANSITO', 'ENTREGUE']


def test_shift_month_crosses_years():
    assert shift_month(date(2025, 1, 1), -1) == date(2024, 12, 1)
    assert shift_month(date(2025, 12, 1), 1) == date(2026, 1, 1)
