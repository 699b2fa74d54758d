# controle_frete/services/preco_service.py
# Regras de negócio da tabela de preços (CRUD, paginação, lista de marcas).

import math
import threading
from typing import Any, Dict, List, Optional

from cachetools import TTLCache
from sqlalchemy.exc import SQLAlchemyError

from controle_frete.database import get_db_session
from controle_frete.database.preco_repository import PrecoRepository
from controle_frete.domain.preco import Preco
from controle_frete.utils.data_conversion import parse_non_negative_decimal, required_text
from controle_frete.utils.logger import logger
from controle_frete.api.errors import NotFoundError, ServiceError, ValidationError, DatabaseError

REQUIRED_FIELDS = ('marca', 'codigo', 'preco', 'descricao')
MAX_PAGE_SIZE = 500

_MARCAS_KEY = 'marcas'


class PrecoService:
    """Camada de serviço da tabela de preços. A lista de marcas fica em cache (TTL) e é limpa a cada escrita."""

    def __init__(self, preco_repository: PrecoRepository, page_size: int = 50, marcas_cache_ttl: int = 300):
        self.preco_repository = preco_repository
        self.page_size = page_size
        self._marcas_cache = TTLCache(maxsize=1, ttl=marcas_cache_ttl)
        self._cache_lock = threading.Lock()
        logger.info(f"PrecoService inicializado (página padrão {page_size}, cache de marcas {marcas_cache_ttl}s).")

    def _build_values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ValidationError("Corpo da requisição deve ser um objeto JSON.")
        missing = [name for name in REQUIRED_FIELDS if required_text(data.get(name)) is None]
        if missing:
            raise ValidationError(f"Campos obrigatórios faltando: {', '.join(missing)}")
        try:
            preco = parse_non_negative_decimal(data.get('preco'), default=None)
        except ValueError as e:
            raise ValidationError(f"Campo 'preco' inválido: {e}") from e
        return {
            'marca': required_text(data.get('marca')),
            'codigo': required_text(data.get('codigo')),
            'preco': preco,
            'descricao': required_text(data.get('descricao')).upper(),
        }

    def _invalidate_marcas(self):
        with self._cache_lock:
            self._marcas_cache.clear()
        logger.debug("Cache de marcas invalidado.")

    @staticmethod
    def _parse_positive_int(value: Any, name: str, default: int) -> int:
        if value in (None, ''):
            return default
        try:
            number = int(value)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Parâmetro '{name}' inválido: '{value}'") from e
        if number < 1:
            raise ValidationError(f"Parâmetro '{name}' deve ser maior que zero.")
        return number

    def list_precos(self, page: Any = None, limit: Any = None, marca: Optional[str] = None,
                    search: Optional[str] = None) -> Dict[str, Any]:
        """
        Página de preços no formato {data, total, page, totalPages}.
        totalPages = ceil(total / limit); 0 quando não há registros.
        """
        page_number = self._parse_positive_int(page, 'page', 1)
        page_size = min(self._parse_positive_int(limit, 'limit', self.page_size), MAX_PAGE_SIZE)
        search = (search or '').strip() or None

        try:
            with get_db_session() as db:
                rows, total = self.preco_repository.search_page(db, page_number, page_size, marca, search)
                data = [row.to_dict() for row in rows]
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao buscar preços: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível buscar os preços: {e}") from e

        return {
            'data': data,
            'total': total,
            'page': page_number,
            'totalPages': math.ceil(total / page_size) if total else 0,
        }

    def get_preco(self, preco_id: int) -> Preco:
        try:
            with get_db_session() as db:
                preco = self.preco_repository.find_by_id(db, preco_id)
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao buscar preço ID {preco_id}: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível buscar o preço: {e}") from e
        if preco is None:
            raise NotFoundError("Preço não encontrado")
        return preco

    def create_preco(self, data: Dict[str, Any]) -> Preco:
        values = self._build_values(data)
        logger.info(f"Criando preço {values['marca']}/{values['codigo']}.")
        try:
            with get_db_session() as db:
                preco = self.preco_repository.insert(db, Preco(**values))
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao criar preço {values['marca']}/{values['codigo']}: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível criar o preço: {e}") from e
        self._invalidate_marcas()
        logger.info(f"Preço criado: ID {preco.id}.")
        return preco

    def update_preco(self, preco_id: int, data: Dict[str, Any]) -> Preco:
        values = self._build_values(data)
        logger.info(f"Atualizando preço ID {preco_id}.")
        try:
            with get_db_session() as db:
                preco = self.preco_repository.update_by_id(db, preco_id, values)
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao atualizar preço ID {preco_id}: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível atualizar o preço: {e}") from e
        if preco is None:
            raise NotFoundError("Preço não encontrado")
        self._invalidate_marcas()
        return preco

    def delete_preco(self, preco_id: int) -> None:
        logger.info(f"Excluindo preço ID {preco_id}.")
        try:
            with get_db_session() as db:
                deleted = self.preco_repository.delete_by_id(db, preco_id)
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao excluir preço ID {preco_id}: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível excluir o preço: {e}") from e
        if not deleted:
            raise NotFoundError("Preço não encontrado")
        self._invalidate_marcas()

    def list_marcas(self) -> List[str]:
        with self._cache_lock:
            cached = self._marcas_cache.get(_MARCAS_KEY)
        if cached is not None:
            logger.debug("Marcas servidas do cache.")
            return list(cached)

        try:
            with get_db_session() as db:
                marcas = self.preco_repository.distinct_marcas(db)
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao listar marcas: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível listar as marcas: {e}") from e

        with self._cache_lock:
            self._marcas_cache[_MARCAS_KEY] = tuple(marcas)
        return marcas
