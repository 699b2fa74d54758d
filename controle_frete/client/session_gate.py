# controle_frete/client/session_gate.py
# Portão de sessão do cliente: obtém o token (URL ou armazenamento da aba) e valida no portal.

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Union

from controle_frete.api.errors import SessionExpiredError, PortalIntegrationError
from controle_frete.utils.logger import logger

SESSION_STORAGE_KEY = 'controleFreteSession'
TOKEN_QUERY_PARAM = 'sessionToken'
NOT_AUTHORIZED_MESSAGE = 'NÃO AUTORIZADO'
SESSION_EXPIRED_MESSAGE = 'Sua sessão expirou'


@dataclass(frozen=True)
class Authenticated:
    token: str
    session: Dict[str, Any] = field(default_factory=dict)
    # True quando o token veio da URL e deve ser removido do endereço
    strip_token_from_address: bool = False


@dataclass(frozen=True)
class Denied:
    message: str
    portal_url: str


GateResult = Union[Authenticated, Denied]


class SessionStore:
    """Armazenamento por aba (equivalente ao sessionStorage do navegador)."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        self._data[key] = value

    def remove(self, key: str):
        self._data.pop(key, None)


class SessionGate:
    """
    Decide se o cliente pode operar. O portal é a autoridade da sessão; sem verificador
    configurado o token é aceito até a primeira resposta 401 da API.
    """

    def __init__(self, portal_url: str, verifier: Optional[Callable[[str], Dict[str, Any]]] = None,
                 store: Optional[SessionStore] = None):
        self.portal_url = portal_url.rstrip('/')
        self.verifier = verifier
        self.store = store or SessionStore()
        self.token: Optional[str] = None
        self.session: Dict[str, Any] = {}

    def authenticate(self, query_params: Optional[Mapping[str, str]] = None) -> GateResult:
        query_params = query_params or {}
        token_from_url = query_params.get(TOKEN_QUERY_PARAM)
        if token_from_url:
            self.store.set(SESSION_STORAGE_KEY, token_from_url)
            token = token_from_url
        else:
            token = self.store.get(SESSION_STORAGE_KEY)

        if not token:
            logger.info("Nenhum token de sessão disponível: acesso negado.")
            return Denied(NOT_AUTHORIZED_MESSAGE, self.portal_url)

        session: Dict[str, Any] = {}
        if self.verifier is not None:
            try:
                session = self.verifier(token) or {}
            except SessionExpiredError as e:
                logger.info(f"Portal recusou a sessão: {e.payload.get('message') if e.payload else e}")
                self._clear()
                return Denied(SESSION_EXPIRED_MESSAGE, self.portal_url)
            except PortalIntegrationError as e:
                logger.error(f"Não foi possível verificar a sessão no portal: {e}")
                return Denied("Erro ao verificar autenticação", self.portal_url)

        self.token = token
        self.session = session
        logger.info("Sessão autenticada.")
        return Authenticated(token, session, strip_token_from_address=bool(token_from_url))

    def expire(self) -> Denied:
        """Chamado quando qualquer chamada à API responde 401."""
        logger.warning("Sessão expirada: limpando token.")
        self._clear()
        return Denied(SESSION_EXPIRED_MESSAGE, self.portal_url)

    def _clear(self):
        self.store.remove(SESSION_STORAGE_KEY)
        self.token = None
        self.session = {}
