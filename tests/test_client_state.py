from datetime import date

from controle_frete.client import FreteState, PrecoState, has_duplicate_codigo

TODAY = date(2025, 3, 15)


def test_frete_state_starts_on_current_month():
    state = FreteState(today=lambda: TODAY)
    assert state.month == date(2025, 3, 1)
    assert state.month_label == 'Março 2025'
    state.change_month(-3)
    assert state.month_label == 'Dezembro 2024'


def test_frete_state_filters_and_views():
    state = FreteState(today=lambda: TODAY)
    state.replace_all([
        {'id': 1, 'numero_nf': '20', 'data_emissao': '2025-03-02', 'tipo_nf': 'ENVIO', 'status': 'EM_TRANSITO',
         'transportadora': 'Jamef', 'previsao_entrega': '2025-03-10', 'valor_nf': 50, 'valor_frete': 5},
        {'id': 2, 'numero_nf': '10', 'data_emissao': '2025-03-03', 'tipo_nf': 'ENVIO', 'status': 'ENTREGUE',
         'transportadora': 'Braspress', 'valor_nf': 70, 'valor_frete': 7},
    ], fingerprint='abc')

    assert state.fingerprint == 'abc'
    assert [f['id'] for f in state.visible()] == [2, 1]
    assert [f['id'] for f in state.late()] == [1]
    assert state.dashboard()['fora_do_prazo'] == 1

    state.set_filters(transportadora='Jamef')
    state.set_filters(search='20')
    assert state.filters.transportadora == 'Jamef'
    assert [f['id'] for f in state.visible()] == [1]


def test_snapshot_is_a_copy():
    state = FreteState(today=lambda: TODAY)
    state.replace_all([{'id': 1, 'numero_nf': '1'}])
    state.snapshot()[0]['numero_nf'] = 'alterado'
    assert state.find(1)['numero_nf'] == '1'


def test_remove_and_insert_at_keep_position():
    state = FreteState(today=lambda: TODAY)
    state.replace_all([{'id': 1}, {'id': 2}, {'id': 3}])
    index, record = state.remove(2)
    assert index == 1
    assert state.remove(99) is None
    state.insert_at(index, record)
    assert [r['id'] for r in state.snapshot()] == [1, 2, 3]


def test_insert_at_leaves_record_already_back_untouched():
    state = FreteState(today=lambda: TODAY)
    state.replace_all([{'id': 1, 'numero_nf': '1'}, {'id': 2, 'numero_nf': '2'}])
    index, record = state.remove(1)
    state.replace_all([{'id': 1, 'numero_nf': 'servidor'}, {'id': 2, 'numero_nf': '2'}])

    state.insert_at(index, record)
    assert [(r['id'], r['numero_nf']) for r in state.snapshot()] == [(1, 'servidor'), (2, '2')]


def test_observacoes_for_display_keep_unreadable_entries():
    state = FreteState(today=lambda: TODAY)
    state.replace_all([{'id': 1, 'observacoes': '[{"texto": "ok", "timestamp": "t"}, {"timestamp": "t2"}]'}])

    observacoes = state.observacoes(1)
    assert [obs.texto for obs in observacoes] == ['ok', '']
    assert [obs.legivel for obs in observacoes] == [True, False]
    assert state.observacoes(99) == []


def test_preco_state_paging():
    state = PrecoState(page_size=2)
    state.replace_page({'data': [{'id': 1}], 'total': 5, 'page': 2, 'totalPages': 3}, fingerprint='x')
    assert (state.page, state.total, state.total_pages) == (2, 5, 3)

    assert state.go_to_page(10) == 3
    assert state.go_to_page(0) == 1

    state.page = 3
    state.set_filter(marca='')
    assert state.marca == 'TODAS'
    assert state.page == 1
    state.set_filter(search='  paraf ')
    assert state.search == 'paraf'


def test_duplicate_code_check_is_per_brand_and_case_insensitive():
    records = [
        {'id': 1, 'marca': 'ACME', 'codigo': 'a-1'},
        {'id': 2, 'marca': 'BOSCH', 'codigo': 'B-1'},
    ]
    assert has_duplicate_codigo(records, 'acme', ' A-1 ')
    assert not has_duplicate_codigo(records, 'BOSCH', 'A-1')
    assert not has_duplicate_codigo(records, 'ACME', 'A-1', exclude_id=1)
