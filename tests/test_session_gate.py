from controle_frete.client import SessionGate, SessionStore, Authenticated, Denied
from controle_frete.client.session_gate import SESSION_STORAGE_KEY
from controle_frete.api.errors import SessionExpiredError, PortalIntegrationError

PORTAL = 'https://portal.example.com'


def test_token_from_address_is_stored_and_stripped():
    store = SessionStore()
    gate = SessionGate(PORTAL + '/', store=store)

    result = gate.authenticate({'sessionToken': 'abc'})

    assert result == Authenticated('abc', {}, strip_token_from_address=True)
    assert store.get(SESSION_STORAGE_KEY) == 'abc'
    assert gate.token == 'abc'


def test_token_from_tab_storage():
    store = SessionStore()
    store.set(SESSION_STORAGE_KEY, 'guardado')
    result = SessionGate(PORTAL, store=store).authenticate({})
    assert result == Authenticated('guardado', {}, strip_token_from_address=False)


def test_no_token_is_not_authorized():
    assert SessionGate(PORTAL).authenticate() == Denied('NÃO AUTORIZADO', PORTAL)


def test_verifier_session_is_kept():
    gate = SessionGate(PORTAL, verifier=lambda token: {'username': 'ana'})
    result = gate.authenticate({'sessionToken': 'abc'})
    assert result.session == {'username': 'ana'}
    assert gate.session == {'username': 'ana'}


def test_rejected_session_clears_token():
    store = SessionStore()

    def verifier(token):
        raise SessionExpiredError(payload={'message': 'Sua sessão expirou'})

    gate = SessionGate(PORTAL, verifier=verifier, store=store)
    assert gate.authenticate({'sessionToken': 'abc'}) == Denied('Sua sessão expirou', PORTAL)
    assert store.get(SESSION_STORAGE_KEY) is None
    assert gate.token is None


def test_portal_outage_keeps_token_for_retry():
    store = SessionStore()

    def verifier(token):
        raise PortalIntegrationError("Erro interno")

    gate = SessionGate(PORTAL, verifier=verifier, store=store)
    result = gate.authenticate({'sessionToken': 'abc'})
    assert isinstance(result, Denied)
    assert result.message == 'Erro ao verificar autenticação'
    assert store.get(SESSION_STORAGE_KEY) == 'abc'


def test_expire_clears_everything():
    store = SessionStore()
    gate = SessionGate(PORTAL, store=store)
    gate.authenticate({'sessionToken': 'abc'})

    assert gate.expire() == Denied('Sua sessão expirou', PORTAL)
    assert store.get(SESSION_STORAGE_KEY) is None
    assert gate.token is None
