# controle_frete/database/base_repository.py
# Repositório genérico sobre um modelo ORM (adaptador do armazenamento de registros).

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from controle_frete.utils.logger import logger
from controle_frete.api.errors import DatabaseError

from .base import Base

ModelT = TypeVar('ModelT', bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Operações CRUD genéricas para um modelo ORM.
    Os métodos recebem a Session aberta por get_db_session(); commit/rollback são externos.
    """

    model: Type[ModelT]

    def __init__(self, engine: Engine):
        if not isinstance(engine, Engine):
            raise TypeError("engine must be an instance of sqlalchemy.engine.Engine")
        self.engine = engine
        logger.debug(f"{self.__class__.__name__} initialized with SQLAlchemy engine: {engine.url.database}")

    @property
    def _name(self) -> str:
        return self.model.__tablename__

    def find_by_id(self, db: Session, record_id: int) -> Optional[ModelT]:
        logger.debug(f"ORM: Buscando {self._name} ID {record_id}")
        try:
            return db.get(self.model, record_id)
        except SQLAlchemyError as e:
            logger.error(f"ORM: Erro ao buscar {self._name} ID {record_id}: {e}", exc_info=True)
            raise DatabaseError(f"Erro ao buscar registro: {e}") from e

    def list_ordered(self, db: Session, order_by: str, descending: bool = False) -> List[ModelT]:
        """Lista todos os registros ordenados por uma coluna (id como desempate)."""
        column = getattr(self.model, order_by)
        primary = column.desc() if descending else column.asc()
        logger.debug(f"ORM: Listando {self._name} por {order_by} ({'desc' if descending else 'asc'})")
        try:
            stmt = select(self.model).order_by(primary, self.model.id.desc() if descending else self.model.id.asc())
            return list(db.scalars(stmt).all())
        except SQLAlchemyError as e:
            logger.error(f"ORM: Erro ao listar {self._name}: {e}", exc_info=True)
            raise DatabaseError(f"Erro ao listar registros: {e}") from e

    def insert(self, db: Session, record: ModelT) -> ModelT:
        logger.debug(f"ORM: Inserindo {self._name}")
        try:
            db.add(record)
            db.flush()  # gera o ID
            db.refresh(record)
            logger.info(f"ORM: {self._name} ID {record.id} adicionado à sessão. Commit pendente.")
            return record
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"ORM: Erro ao inserir {self._name}: {e}", exc_info=True)
            raise DatabaseError(f"Erro ao inserir registro: {e}") from e

    def update_by_id(self, db: Session, record_id: int, values: Dict[str, Any]) -> Optional[ModelT]:
        """Aplica os valores ao registro. Retorna None se o ID não existir."""
        logger.debug(f"ORM: Atualizando {self._name} ID {record_id}: campos {sorted(values)}")
        try:
            record = db.get(self.model, record_id)
            if record is None:
                logger.debug(f"ORM: {self._name} ID {record_id} não encontrado para atualização.")
                return None
            for key, value in values.items():
                setattr(record, key, value)
            db.flush()
            db.refresh(record)
            logger.info(f"ORM: {self._name} ID {record_id} atualizado na sessão. Commit pendente.")
            return record
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"ORM: Erro ao atualizar {self._name} ID {record_id}: {e}", exc_info=True)
            raise DatabaseError(f"Erro ao atualizar registro: {e}") from e

    def delete_by_id(self, db: Session, record_id: int) -> bool:
        """Remove o registro. Retorna False se o ID não existir."""
        logger.debug(f"ORM: Excluindo {self._name} ID {record_id}")
        try:
            record = db.get(self.model, record_id)
            if record is None:
                return False
            db.delete(record)
            db.flush()
            logger.info(f"ORM: {self._name} ID {record_id} marcado para exclusão. Commit pendente.")
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"ORM: Erro ao excluir {self._name} ID {record_id}: {e}", exc_info=True)
            raise DatabaseError(f"Erro ao excluir registro: {e}") from e
