# controle_frete/client/errors.py
# Exceções do lado cliente (chamadas HTTP à API de fretes).

from typing import Any, Dict, Optional


class ClientError(Exception):
    """Base class for client-side errors."""
    message = "Erro na comunicação com o servidor."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None,
                 payload: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.status_code = status_code
        self.payload = payload or {}

    def __str__(self):
        return self.message


class TransientNetworkError(ClientError):
    """Timeout, connection failure or a 5xx answer. The sync loop retries at the next tick."""
    message = "Servidor indisponível."


class SessionExpiredError(ClientError):
    """The API answered 401: the portal session is no longer valid."""
    message = "Sua sessão expirou"


class RequestRejectedError(ClientError):
    """The API rejected the request (4xx other than 401)."""
    message = "Operação recusada pelo servidor."
