# tests/conftest.py
import os

# Configuração de ambiente antes de importar o pacote (logger e config são singletons de módulo)
os.environ.setdefault('LOG_TO_FILE', 'false')
os.environ.setdefault('LOG_LEVEL', 'WARNING')
os.environ.setdefault('DB_TYPE', 'SQLITE')

import pytest

from controle_frete.app import create_app
from controle_frete.config.settings import Config
from controle_frete.database import dispose_sqlalchemy_engine
from controle_frete.api.errors import SessionExpiredError, PortalIntegrationError

VALID_TOKEN = 'token-valido'
EXPIRED_TOKEN = 'token-expirado'
PORTAL_DOWN_TOKEN = 'portal-fora'


class StubSessionService:
    """Substitui o portal nos testes de API."""

    def __init__(self):
        self.calls = []

    def verify(self, session_token):
        self.calls.append(session_token)
        if session_token == VALID_TOKEN:
            return {'username': 'maria.souza'}
        if session_token == PORTAL_DOWN_TOKEN:
            raise PortalIntegrationError("Erro interno", payload={'message': "Erro ao verificar autenticação"})
        raise SessionExpiredError(payload={'message': "Sua sessão expirou"})


@pytest.fixture
def app(tmp_path):
    config = Config(
        SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'controle_frete.db'}",
        LOG_LEVEL='WARNING',
    )
    application = create_app(config)
    application.config['TESTING'] = True
    application.config['session_service'] = StubSessionService()
    yield application
    dispose_sqlalchemy_engine()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {'X-Session-Token': VALID_TOKEN}


@pytest.fixture
def frete_payload():
    return {
        'numero_nf': '1234',
        'nome_orgao': 'Prefeitura de Campinas',
        'data_coleta': '2025-01-02',
        'data_emissao': '2025-01-02',
        'tipo_nf': 'ENVIO',
        'valor_nf': 1500.5,
        'valor_frete': 120,
        'transportadora': 'Jamef',
        'vendedor': 'Roberto',
        'previsao_entrega': '2025-01-09',
    }
