# controle_frete/client/__init__.py
# Cliente da API: portão de sessão, estado local, comandos otimistas e loop de sincronização.

from .errors import ClientError, TransientNetworkError, SessionExpiredError, RequestRejectedError
from .api_client import ApiClient
from .session_gate import SessionGate, SessionStore, Authenticated, Denied
from .state import FreteState, PrecoState, has_duplicate_codigo
from .commands import (
    CreateFrete, UpdateFrete, DeleteFrete, ToggleStatus, CreatePreco, UpdatePreco, DeletePreco, CommandRunner,
)
from .sync_loop import SyncStatus, SyncLoop, FreteSyncLoop, PrecoSyncLoop, fingerprint

__all__ = [
    "ClientError", "TransientNetworkError", "SessionExpiredError", "RequestRejectedError",
    "ApiClient",
    "SessionGate", "SessionStore", "Authenticated", "Denied",
    "FreteState", "PrecoState", "has_duplicate_codigo",
    "CreateFrete", "UpdateFrete", "DeleteFrete", "ToggleStatus", "CreatePreco", "UpdatePreco", "DeletePreco",
    "CommandRunner",
    "SyncStatus", "SyncLoop", "FreteSyncLoop", "PrecoSyncLoop", "fingerprint",
]
