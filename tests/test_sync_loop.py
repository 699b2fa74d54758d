from datetime import date

import pytest

from controle_frete.client import (
    FreteState, PrecoState, FreteSyncLoop, PrecoSyncLoop, SyncStatus, fingerprint,
    TransientNetworkError, SessionExpiredError, RequestRejectedError,
)

TODAY = date(2025, 3, 15)


class FakeApi:
    """Responde com self.fretes, ou levanta self.error se definido."""

    def __init__(self, fretes=None):
        self.fretes = fretes if fretes is not None else []
        self.error = None
        self.calls = []

    def list_fretes(self):
        self.calls.append('list_fretes')
        if self.error is not None:
            raise self.error
        return [dict(f) for f in self.fretes]

    def list_precos(self, page=1, limit=50, marca=None, search=None):
        self.calls.append(('list_precos', page, limit, marca, search))
        if self.error is not None:
            raise self.error
        return {'data': [], 'total': 0, 'page': page, 'totalPages': 0}


class Events:
    def __init__(self):
        self.changes = []
        self.transitions = []
        self.messages = []
        self.expired = 0
        self.alerts = []


@pytest.fixture
def events():
    return Events()


@pytest.fixture
def api():
    return FakeApi([{'id': 1, 'numero_nf': '1', 'tipo_nf': 'ENVIO', 'status': 'EM_TRANSITO',
                     'previsao_entrega': '2025-03-01', 'data_emissao': '2025-03-01'}])


@pytest.fixture
def state():
    return FreteState(today=lambda: TODAY)


@pytest.fixture
def loop(api, state, events):
    return FreteSyncLoop(
        api, state, today=lambda: TODAY,
        on_late_alert=events.alerts.append,
        heartbeat_interval=15, refresh_interval=10,
        on_change=events.changes.append,
        on_status_change=lambda old, new: events.transitions.append((old, new)),
        on_session_expired=lambda: setattr(events, 'expired', events.expired + 1),
        notify=lambda kind, message: events.messages.append((kind, message)),
    )


def test_fingerprint_ignores_key_order():
    assert fingerprint({'a': 1, 'b': [1, 2]}) == fingerprint({'b': [1, 2], 'a': 1})
    assert fingerprint([{'id': 1}]) != fingerprint([{'id': 2}])


def test_starts_offline_and_loads_on_first_heartbeat(loop, state, events):
    assert loop.status == SyncStatus.OFFLINE
    assert loop.heartbeat() == SyncStatus.ONLINE
    assert events.transitions == [(SyncStatus.OFFLINE, SyncStatus.ONLINE)]
    assert len(events.changes) == 1
    assert state.find(1) is not None
    assert state.fingerprint == loop.last_fingerprint


def test_refresh_only_notifies_on_change(loop, api, events):
    loop.heartbeat()
    assert not loop.refresh()
    api.fretes.append({'id': 2, 'numero_nf': '2', 'tipo_nf': 'ENVIO', 'status': 'EM_TRANSITO'})
    assert loop.refresh()
    assert len(events.changes) == 2


def test_sync_now_forces_notification(loop, events):
    loop.heartbeat()
    assert loop.sync_now()
    assert len(events.changes) == 2
    assert events.messages == [('success', 'Dados sincronizados')]


def test_sync_now_offline(loop, events):
    assert not loop.sync_now()
    assert events.messages == [('error', 'Sistema offline. Não foi possível sincronizar.')]


def test_refresh_is_skipped_while_offline(loop, api):
    assert not loop.refresh()
    assert api.calls == []


def test_overlapping_refresh_is_discarded(loop, api):
    loop.heartbeat()
    calls_before = len(api.calls)
    assert loop._fetch_lock.acquire(blocking=False)
    try:
        assert not loop.refresh(force=True)
    finally:
        loop._fetch_lock.release()
    assert len(api.calls) == calls_before


def test_network_failure_goes_offline_and_recovers_with_full_reload(loop, api, events):
    loop.heartbeat()
    api.error = TransientNetworkError()
    assert loop.heartbeat() == SyncStatus.OFFLINE

    api.error = None
    assert loop.heartbeat() == SyncStatus.ONLINE
    assert len(events.changes) == 2
    assert events.transitions == [
        (SyncStatus.OFFLINE, SyncStatus.ONLINE),
        (SyncStatus.ONLINE, SyncStatus.OFFLINE),
        (SyncStatus.OFFLINE, SyncStatus.ONLINE),
    ]


def test_refresh_network_failure_goes_offline(loop, api):
    loop.heartbeat()
    api.error = TransientNetworkError()
    assert not loop.refresh()
    assert loop.status == SyncStatus.OFFLINE


def test_rejected_refresh_keeps_status_and_notifies(loop, api, events):
    loop.heartbeat()
    api.error = RequestRejectedError("Erro ao buscar fretes")
    assert not loop.refresh()
    assert loop.status == SyncStatus.ONLINE
    assert events.messages == [('error', 'Erro ao sincronizar dados')]


def test_session_expiry_is_terminal(loop, api, events):
    api.error = SessionExpiredError()
    assert loop.heartbeat() == SyncStatus.SESSION_EXPIRED
    assert events.expired == 1

    api.error = None
    assert loop.heartbeat() == SyncStatus.SESSION_EXPIRED
    assert not loop.refresh(force=True)


def test_late_alert_is_raised_once(loop, events):
    loop.heartbeat()
    loop.sync_now()
    assert len(events.alerts) == 1
    assert [f['id'] for f in events.alerts[0]] == [1]


def test_tick_schedule(loop, api):
    loop.tick(now=0)
    assert api.calls == ['list_fretes', 'list_fretes']

    loop.tick(now=5)
    assert len(api.calls) == 2

    loop.tick(now=10)
    assert len(api.calls) == 3

    loop.tick(now=15)
    assert len(api.calls) == 4


def test_preco_loop_keeps_page_and_filters(events):
    api = FakeApi()
    state = PrecoState(page_size=20)
    state.page = 3
    state.set_filter(marca='ACME', search='paraf')
    state.page = 2
    loop = PrecoSyncLoop(api, state, on_change=events.changes.append)

    assert loop.refresh_interval == 30
    loop.heartbeat()

    assert api.calls[0] == ('list_precos', 1, 1, None, None)
    assert api.calls[1] == ('list_precos', 2, 20, 'ACME', 'paraf')
    assert state.total_pages == 0
    assert len(events.changes) == 1
