# controle_frete/database/__init__.py
# Engine e fábrica de sessões do SQLAlchemy (Postgres/Supabase em produção, SQLite local/testes).
# logger e errors são importados dentro das funções: o alembic importa este pacote sem a app.

import threading
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .base import Base

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None
_lock = threading.Lock()

# O pooler do Supabase encerra conexões ociosas
POOL_RECYCLE_SECONDS = 1800


def _engine_options(database_uri: str, pool_size: int, max_overflow: int) -> Dict[str, Any]:
    if database_uri.startswith('sqlite'):
        # O loop de sincronização e o servidor de desenvolvimento usam threads diferentes
        return {'echo': False, 'connect_args': {'check_same_thread': False}}
    return {
        'echo': False,
        'pool_size': pool_size,
        'max_overflow': max_overflow,
        'pool_recycle': POOL_RECYCLE_SECONDS,
        'pool_pre_ping': True,
    }


def _discard(engine: Optional[Engine]):
    global _session_factory
    _session_factory = None
    if engine is not None:
        engine.dispose()


def init_sqlalchemy(database_uri: str, pool_size: int = 5, max_overflow: int = 10) -> Engine:
    """
    Cria o engine, valida a conexão, monta a fábrica de sessões e garante as tabelas
    controle_frete e precos. Chamadas repetidas devolvem o engine já criado.

    Raises:
        ConfigurationError: URI ausente.
        DatabaseError: Banco inacessível ou falha ao criar o esquema.
    """
    from controle_frete.utils.logger import logger
    from controle_frete.api.errors import DatabaseError, ConfigurationError
    from .schema_manager import SchemaManager

    global _engine, _session_factory
    with _lock:
        if _engine is not None and _session_factory is not None:
            logger.warning("Banco de dados já inicializado; reutilizando o engine existente.")
            return _engine
        if not database_uri:
            raise ConfigurationError("URI do banco de dados não configurada.")

        engine = None
        try:
            engine = create_engine(database_uri, **_engine_options(database_uri, pool_size, max_overflow))
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            logger.info(f"Conexão com o banco estabelecida ({engine.dialect.name}).")

            _session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
            SchemaManager(engine).initialize_schema()
        except DatabaseError:
            _discard(engine)
            raise
        except SQLAlchemyError as e:
            _discard(engine)
            logger.critical(f"Falha ao conectar/inicializar o banco de dados: {e}", exc_info=True)
            raise DatabaseError(f"Falha ao inicializar o banco de dados: {e}") from e

        _engine = engine
        return _engine


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Sessão com unidade de trabalho: commit ao sair do bloco, rollback em qualquer erro.
    Erros do SQLAlchemy saem como DatabaseError; os demais são propagados como estão.
    """
    from controle_frete.utils.logger import logger
    from controle_frete.api.errors import DatabaseError

    if _session_factory is None:
        raise RuntimeError("Banco de dados não inicializado: chame init_sqlalchemy primeiro.")

    db = _session_factory()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Erro de banco de dados; transação desfeita: {e}", exc_info=True)
        raise DatabaseError(f"Operação no banco de dados falhou: {e}") from e
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_database_connection() -> None:
    """Usado pelo /health. Levanta exceção se o banco não responder."""
    with get_db_session() as db:
        db.execute(text("SELECT 1"))


def dispose_sqlalchemy_engine():
    """Fecha o pool de conexões (encerramento da aplicação e fim de cada teste)."""
    from controle_frete.utils.logger import logger

    global _engine
    with _lock:
        if _engine is None:
            return
        try:
            _engine.dispose()
            logger.info("Pool de conexões do banco encerrado.")
        except SQLAlchemyError as e:
            logger.error(f"Erro ao encerrar o pool de conexões: {e}", exc_info=True)
        finally:
            _engine = None
            _discard(None)


__all__ = [
    "init_sqlalchemy",
    "get_db_session",
    "check_database_connection",
    "dispose_sqlalchemy_engine",
    "Base",
]
