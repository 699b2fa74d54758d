# controle_frete/database/preco_repository.py
# Acesso à tabela precos: paginação com filtro por marca e busca textual.

from typing import List, Optional, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from .base_repository import BaseRepository
from controle_frete.domain.preco import Preco
from controle_frete.utils.logger import logger
from controle_frete.api.errors import DatabaseError


class PrecoRepository(BaseRepository[Preco]):
    model = Preco

    def search_page(self, db: Session, page: int, limit: int,
                    marca: Optional[str] = None, search: Optional[str] = None) -> Tuple[List[Preco], int]:
        """
        Retorna uma página de preços ordenada por marca e código, e o total de registros
        que atendem aos filtros.

        Args:
            page: Página, começando em 1.
            limit: Itens por página.
            marca: Filtro exato de marca ('TODAS' ou vazio = sem filtro).
            search: Busca (case-insensitive) em código, descrição e marca.
        """
        logger.debug(f"ORM: Buscando preços página={page} limit={limit} marca={marca!r} search={search!r}")
        conditions = []
        if marca and marca != 'TODAS':
            conditions.append(Preco.marca == marca)
        if search:
            pattern = f"%{search.strip().lower()}%"
            conditions.append(or_(
                func.lower(Preco.codigo).like(pattern),
                func.lower(Preco.descricao).like(pattern),
                func.lower(Preco.marca).like(pattern),
            ))

        try:
            count_stmt = select(func.count()).select_from(Preco).where(*conditions)
            total = db.scalar(count_stmt) or 0

            stmt = (
                select(Preco)
                .where(*conditions)
                .order_by(Preco.marca.asc(), Preco.codigo.asc(), Preco.id.asc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            rows = list(db.scalars(stmt).all())
            logger.debug(f"ORM: {len(rows)} preços na página {page} (total {total}).")
            return rows, total
        except SQLAlchemyError as e:
            logger.error(f"ORM: Erro ao buscar página de preços: {e}", exc_info=True)
            raise DatabaseError(f"Erro ao buscar preços: {e}") from e

    def distinct_marcas(self, db: Session) -> List[str]:
        try:
            stmt = select(Preco.marca).distinct().order_by(Preco.marca.asc())
            return [m for m in db.scalars(stmt).all() if m]
        except SQLAlchemyError as e:
            logger.error(f"ORM: Erro ao listar marcas: {e}", exc_info=True)
            raise DatabaseError(f"Erro ao listar marcas: {e}") from e
