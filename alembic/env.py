# alembic/env.py
# Migrações das tabelas do controle de fretes. A URL vem da configuração da aplicação
# (.env / DATABASE_URL); alembic.ini coloca a raiz do projeto no sys.path.
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

from controle_frete.config import config as app_config
from controle_frete.database.base import Base
import controle_frete.domain  # noqa: F401  (registra Frete e Preco em Base.metadata)

target_metadata = Base.metadata
MANAGED_TABLES = set(target_metadata.tables)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    url = app_config.SQLALCHEMY_DATABASE_URI
    if not url:
        raise RuntimeError("SQLALCHEMY_DATABASE_URI não configurado: defina DATABASE_URL ou POSTGRES_* no .env")
    return url


def include_object(obj, name, type_, reflected, compare_to):
    # O banco do Supabase é compartilhado com o portal: o autogenerate só olha as nossas tabelas
    if type_ == "table":
        return name in MANAGED_TABLES
    table = getattr(obj, "table", None)
    return table is None or table.name in MANAGED_TABLES


def _configure(**kwargs):
    context.configure(
        target_metadata=target_metadata,
        include_object=include_object,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _database_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        _configure(connection=connection, render_as_batch=connection.dialect.name == "sqlite")
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
