# controle_frete/api/decorators.py
# Decorators for API endpoints: session verification delegated to the portal.

from functools import wraps
from flask import request, current_app, jsonify
from controle_frete.services.session_service import PortalSessionService
from controle_frete.api.errors import ApiError, SessionExpiredError, PortalIntegrationError
from controle_frete.utils.logger import logger

SESSION_HEADER = 'X-Session-Token'

# Helper to get the session service instance from app context
def _get_session_service() -> PortalSessionService:
    service = current_app.config.get('session_service')
    if not service:
        logger.critical("PortalSessionService not found in application config!")
        raise ApiError("Serviço de autenticação indisponível.", 503)
    return service

def session_required(f):
    """
    Requires a valid portal session (X-Session-Token header).
    Attaches the portal session to request.current_session and the token to request.session_token.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        session_token = request.headers.get(SESSION_HEADER)
        if not session_token:
            logger.debug(f"Access denied: no session token on {request.method} {request.path}.")
            return jsonify({"error": "Não autenticado", "message": "Token de sessão não encontrado"}), 401

        try:
            session = _get_session_service().verify(session_token)
        except SessionExpiredError as e:
            return jsonify(e.to_dict()), 401
        except PortalIntegrationError as e:
            return jsonify(e.to_dict()), 500
        except ApiError as e:
            return jsonify(e.to_dict()), e.status_code
        except Exception as e:
            logger.error(f"Error during session_required check: {e}", exc_info=True)
            return jsonify({"error": "Erro interno", "message": "Erro ao verificar autenticação"}), 500

        request.current_session = session
        request.session_token = session_token
        return f(*args, **kwargs)
    return decorated_function
