# controle_frete/database/schema_manager.py
# Gerencia a criação inicial das tabelas do banco de dados.

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .base import Base
from controle_frete.utils.logger import logger
from controle_frete.api.errors import DatabaseError

class SchemaManager:
    def __init__(self, engine: Engine):
        self.engine = engine
        logger.debug("SchemaManager inicializado com o engine do SQLAlchemy.")

    def initialize_schema(self):
        """Cria as tabelas ausentes (controle_frete, precos). Tabelas existentes não são alteradas."""
        # Garante que os modelos estejam registrados em Base.metadata
        import controle_frete.domain  # noqa: F401

        try:
            logger.info("Iniciando a criação do esquema do banco de dados...")
            Base.metadata.create_all(bind=self.engine)
            logger.info(f"Tabelas criadas/verificadas com sucesso: {sorted(Base.metadata.tables)}")
        except SQLAlchemyError as e:
            logger.critical(f"Falha na inicialização do esquema do banco de dados: {e}", exc_info=True)
            raise DatabaseError(f"Falha na inicialização do esquema: {e}") from e
