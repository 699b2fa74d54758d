# controle_frete/database/frete_repository.py
# Acesso à tabela controle_frete.

from typing import List

from sqlalchemy.orm import Session

from .base_repository import BaseRepository
from controle_frete.domain.frete import Frete


class FreteRepository(BaseRepository[Frete]):
    model = Frete

    def list_all(self, db: Session) -> List[Frete]:
        """Todos os fretes, mais recentes (data de emissão) primeiro."""
        return self.list_ordered(db, 'data_emissao', descending=True)
