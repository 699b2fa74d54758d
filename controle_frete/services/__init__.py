# controle_frete/services/__init__.py
# Makes 'services' a package. Exports service classes.

from .frete_service import FreteService
from .preco_service import PrecoService
from .session_service import PortalSessionService

__all__ = [
    "FreteService",
    "PrecoService",
    "PortalSessionService",
]
