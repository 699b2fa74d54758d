# controle_frete/services/session_service.py
# Delegates session validation to the portal (single sign-on authority).

from typing import Any, Dict, Optional

import requests

from controle_frete.utils.logger import logger
from controle_frete.api.errors import SessionExpiredError, PortalIntegrationError

SESSION_EXPIRED_MESSAGE = "Sua sessão expirou"


class PortalSessionService:
    """
    Verifies session tokens against POST {portal_url}/api/verify-session.
    No verdict is cached: every call asks the portal again.
    """

    def __init__(self, portal_url: str, timeout: int = 10):
        self.portal_url = portal_url.rstrip('/')
        self.verify_url = f"{self.portal_url}/api/verify-session"
        self.timeout = timeout
        logger.info(f"PortalSessionService initialized for URL: {self.verify_url}")

    def verify(self, session_token: str) -> Dict[str, Any]:
        """
        Validates a session token with the portal.

        Returns:
            The portal's 'session' payload (may be empty).

        Raises:
            SessionExpiredError: Portal answered non-2xx or valid=false.
            PortalIntegrationError: Portal unreachable or answered with an unreadable body.
        """
        logger.debug(f"Verifying session token with portal ({self.verify_url}).")
        try:
            response = requests.post(
                self.verify_url,
                json={'sessionToken': session_token},
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Erro ao verificar autenticação no portal: {e}", exc_info=True)
            raise PortalIntegrationError("Erro interno", payload={'message': "Erro ao verificar autenticação"}) from e

        if not response.ok:
            logger.warning(f"Portal rejected session token: HTTP {response.status_code}.")
            raise SessionExpiredError(payload={'message': SESSION_EXPIRED_MESSAGE})

        try:
            session_data = response.json()
        except ValueError as e:
            logger.error(f"Portal returned a non-JSON verification response: {e}")
            raise PortalIntegrationError("Erro interno", payload={'message': "Erro ao verificar autenticação"}) from e

        if not isinstance(session_data, dict) or not session_data.get('valid'):
            message = SESSION_EXPIRED_MESSAGE
            if isinstance(session_data, dict) and session_data.get('message'):
                message = session_data['message']
            logger.info(f"Portal reported invalid session: {message}")
            raise SessionExpiredError(payload={'message': message})

        session = session_data.get('session') or {}
        logger.debug(f"Session verified for user: {session_username(session) or '<desconhecido>'}")
        return session


def session_username(session: Optional[Dict[str, Any]]) -> Optional[str]:
    """Extracts the display username from a portal session payload."""
    if not isinstance(session, dict):
        return None
    for key in ('username', 'name', 'nome', 'email'):
        value = session.get(key)
        if value:
            return str(value)
    return None
