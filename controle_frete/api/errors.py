# controle_frete/api/errors.py
# Defines custom application exceptions and Flask error handlers.

from flask import jsonify, request
from werkzeug.exceptions import HTTPException
from controle_frete.utils.logger import logger

# --- Custom Application Exceptions ---

class ApiError(Exception):
    """Base class for custom API errors."""
    status_code = 500
    message = "Erro interno do servidor."

    def __init__(self, message=None, status_code=None, payload=None):
        super().__init__(message if message is not None else self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload # Optional additional data

    def __str__(self):
        return self.message

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['error'] = self.message
        return rv

class ValidationError(ApiError):
    """Indicates invalid data provided by the client."""
    status_code = 400
    message = "Dados inválidos."

class AuthenticationError(ApiError):
    """Indicates the request carries no session token."""
    status_code = 401
    message = "Não autenticado"

class SessionExpiredError(AuthenticationError):
    """The portal rejected the session token (expired or invalid)."""
    message = "Sessão inválida"

class NotFoundError(ApiError):
    """Indicates a requested resource was not found."""
    status_code = 404
    message = "Registro não encontrado."

class ServiceError(ApiError):
     """Indicates a general error within a service layer operation."""
     status_code = 500
     message = "Erro ao processar a operação."

class DatabaseError(ApiError):
    """Indicates an error during a database operation."""
    status_code = 500
    message = "Erro no banco de dados."

class PortalIntegrationError(ApiError):
    """Indicates an error while contacting the session portal."""
    status_code = 500
    message = "Erro ao verificar autenticação"

class ConfigurationError(ApiError):
     """Indicates a problem with the application's configuration."""
     status_code = 500
     message = "Erro de configuração da aplicação."


# --- Flask Error Handlers ---

def register_error_handlers(app):
    """Registers custom error handlers with the Flask app."""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        """Handler for custom ApiError exceptions."""
        logger.warning(f"API Error Handled: {type(error).__name__} - Status: {error.status_code} - Msg: {error.message}")
        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        return response

    @app.errorhandler(404)
    def handle_not_found(error):
        """Unknown routes answer with the path that was requested."""
        logger.warning(f"Rota não encontrada: {request.method} {request.path}")
        response = jsonify({"error": "404 - Rota não encontrada", "path": request.path})
        response.status_code = 404
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        """Handler for standard werkzeug HTTPExceptions (like 405)."""
        logger.warning(f"HTTP Exception Handled: {error.code} {error.name} - Path: {request.path} - Msg: {error.description}")
        response = jsonify({"error": f"{error.name}: {error.description}"})
        response.status_code = error.code
        return response

    @app.errorhandler(Exception)
    def handle_generic_exception(error):
        """Handler for any other unhandled exceptions."""
        logger.error(f"Unhandled Exception: {error}", exc_info=True)
        response = jsonify({"error": "Erro interno do servidor", "message": str(error)})
        response.status_code = 500
        return response

    logger.info("Custom error handlers registered.")
