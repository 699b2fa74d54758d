from datetime import date, timedelta

import pytest

from controle_frete.domain.enums import TipoNf, StatusFrete
from controle_frete.services.frete_status import (
    derive_status_on_create,
    derive_status_on_update,
    toggle_status,
    is_late,
    is_status_bearing,
    late_records,
    normalize_tipo_nf,
)

TODAY = date(2025, 3, 15)

STATUS_BEARING = ['ENVIO', 'SIMPLES_REMESSA', 'REMESSA_AMOSTRA']
WITHOUT_STATUS = ['CANCELADA', 'DEVOLUCAO', 'TIPO_LEGADO']


@pytest.mark.parametrize('tipo', WITHOUT_STATUS)
@pytest.mark.parametrize('data_entrega', [None, '', '2025-01-10', date(2025, 1, 10)])
def test_types_without_status_never_get_a_status(tipo, data_entrega):
    assert derive_status_on_create(tipo) is None
    assert derive_status_on_update(tipo, data_entrega) is None


@pytest.mark.parametrize('tipo', STATUS_BEARING)
def test_update_is_entregue_iff_delivery_date_present(tipo):
    assert derive_status_on_update(tipo, '2025-01-10') == StatusFrete.ENTREGUE
    assert derive_status_on_update(tipo, date(2025, 1, 10)) == StatusFrete.ENTREGUE
    assert derive_status_on_update(tipo, None) == StatusFrete.EM_TRANSITO
    assert derive_status_on_update(tipo, '') == StatusFrete.EM_TRANSITO
    assert derive_status_on_update(tipo, '   ') == StatusFrete.EM_TRANSITO


@pytest.mark.parametrize('tipo', STATUS_BEARING + [None, ''])
def test_create_starts_in_transit(tipo):
    assert derive_status_on_create(tipo) == StatusFrete.EM_TRANSITO


def test_missing_tipo_is_envio():
    assert normalize_tipo_nf(None) == TipoNf.ENVIO
    assert normalize_tipo_nf('  ') == TipoNf.ENVIO
    assert normalize_tipo_nf('devolucao') == TipoNf.DEVOLUCAO
    assert normalize_tipo_nf('ALGO_ANTIGO') == 'ALGO_ANTIGO'
    assert is_status_bearing(None)
    assert not is_status_bearing('ALGO_ANTIGO')


def test_toggle_from_entregue_clears_delivery_date():
    assert toggle_status('ENTREGUE', '2025-01-10', TODAY) == (StatusFrete.EM_TRANSITO, None)
    assert toggle_status(StatusFrete.ENTREGUE, None, TODAY) == (StatusFrete.EM_TRANSITO, None)


def test_toggle_to_entregue_keeps_existing_date_or_uses_today():
    assert toggle_status('EM_TRANSITO', None, TODAY) == (StatusFrete.ENTREGUE, TODAY)
    assert toggle_status('EM_TRANSITO', '', TODAY) == (StatusFrete.ENTREGUE, TODAY)
    assert toggle_status('EM_TRANSITO', '2025-02-01', TODAY) == (StatusFrete.ENTREGUE, date(2025, 2, 1))
    assert toggle_status(None, None, TODAY) == (StatusFrete.ENTREGUE, TODAY)


def _record(**overrides):
    record = {
        'id': 1,
        'tipo_nf': 'ENVIO',
        'status': 'EM_TRANSITO',
        'previsao_entrega': (TODAY - timedelta(days=1)).isoformat(),
    }
    record.update(overrides)
    return record


def test_scenario_e_late_until_delivered():
    assert is_late(_record(), TODAY)
    assert not is_late(_record(status='ENTREGUE'), TODAY)


def test_late_boundary_is_strict():
    assert not is_late(_record(previsao_entrega=TODAY.isoformat()), TODAY)
    assert not is_late(_record(previsao_entrega=(TODAY + timedelta(days=1)).isoformat()), TODAY)
    assert is_late(_record(previsao_entrega='2025-03-14T23:59:59'), TODAY)


def test_delivered_is_never_late_regardless_of_forecast():
    for days in (-30, -1, 0, 5):
        forecast = (TODAY + timedelta(days=days)).isoformat()
        assert not is_late(_record(status='ENTREGUE', previsao_entrega=forecast), TODAY)


def test_not_late_without_forecast_or_status():
    assert not is_late(_record(previsao_entrega=None), TODAY)
    assert not is_late(_record(previsao_entrega=''), TODAY)
    assert not is_late(_record(tipo_nf='CANCELADA', status=None), TODAY)
    assert not is_late(_record(previsao_entrega='data-invalida'), TODAY)


def test_late_records_sorted_by_forecast():
    records = [
        _record(id=1, previsao_entrega='2025-03-10'),
        _record(id=2, previsao_entrega='2025-03-01'),
        _record(id=3, status='ENTREGUE', previsao_entrega='2025-02-01'),
        _record(id=4, previsao_entrega='2025-03-20'),
        _record(id=5, previsao_entrega='2025-03-01'),
    ]
    assert [r['id'] for r in late_records(records, TODAY)] == [2, 5, 1]
