import json
from datetime import datetime, timezone

import pytest

from controle_frete.domain.observacao import (
    Observacao, parse_observacoes, serialize_observacoes, add_observacao, remove_observacao,
    load_observacoes_lenient,
)


def test_round_trip_preserves_order_and_fields():
    original = [
        Observacao('Cliente pediu entrega pela manhã', '2025-01-02T10:00:00.000Z', 'maria.souza'),
        Observacao('Transportadora confirmou coleta', '2025-01-03T08:30:00.000Z', 'joão'),
        Observacao('Reagendado', '2025-01-04T15:45:12.123Z', 'Usuário'),
    ]
    assert parse_observacoes(serialize_observacoes(original)) == original


def test_serialization_keeps_accents():
    text = serialize_observacoes([Observacao('Atenção: órgão fechado', '2025-01-02T10:00:00.000Z', 'joão')])
    assert 'Atenção' in text
    assert 'joão' in text


def test_parse_accepts_list_empty_and_none():
    assert parse_observacoes(None) == []
    assert parse_observacoes('') == []
    assert parse_observacoes('[]') == []
    parsed = parse_observacoes([{'texto': 'ok', 'timestamp': 't'}])
    assert parsed == [Observacao('ok', 't', None)]


@pytest.mark.parametrize('value', ['{not json', '{"texto": "x"}', '[{"timestamp": "t"}]', '[1, 2]'])
def test_parse_rejects_malformed_values(value):
    with pytest.raises(ValueError):
        parse_observacoes(value)


def test_lenient_load_returns_empty_list_when_field_is_not_a_json_list():
    assert load_observacoes_lenient('{corrompido') == []
    assert load_observacoes_lenient('{"texto": "solta"}') == []


def test_lenient_load_keeps_unreadable_entries_in_place():
    stored = [
        {'texto': 'primeira', 'timestamp': 't1', 'username': 'ana'},
        {'texto': '', 'timestamp': 't2'},
        'nota antiga',
        {'texto': 'quarta', 'timestamp': 't4'},
    ]
    loaded = load_observacoes_lenient(stored)

    assert [obs.legivel for obs in loaded] == [True, False, False, True]
    assert loaded[0] == Observacao('primeira', 't1', 'ana')
    assert loaded[3].texto == 'quarta'
    assert json.loads(serialize_observacoes(loaded)) == [
        {'texto': 'primeira', 'timestamp': 't1', 'username': 'ana'},
        {'texto': '', 'timestamp': 't2'},
        'nota antiga',
        {'texto': 'quarta', 'timestamp': 't4'},
    ]


def test_add_appends_at_end_with_timestamp_and_default_author():
    now = datetime(2025, 1, 5, 12, 0, 0, tzinfo=timezone.utc)
    existing = [Observacao('primeira', '2025-01-01T00:00:00.000Z', 'ana')]
    updated = add_observacao(existing, '  segunda  ', now=now)
    assert len(existing) == 1
    assert updated[0] == existing[0]
    assert updated[1] == Observacao('segunda', '2025-01-05T12:00:00.000Z', 'Usuário')


def test_add_rejects_blank_text():
    with pytest.raises(ValueError, match='Digite uma observação primeiro'):
        add_observacao([], '   ')


def test_remove_by_position():
    items = [Observacao(str(i), 't') for i in range(3)]
    assert [o.texto for o in remove_observacao(items, 1)] == ['0', '2']
    with pytest.raises(IndexError):
        remove_observacao(items, 3)
    with pytest.raises(IndexError):
        remove_observacao(items, -1)
