# controle_frete/app.py
from datetime import datetime, timezone
import atexit
import sys

from flask import Flask, jsonify, request
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError

from controle_frete.config import Config
from controle_frete.api import register_blueprints
from controle_frete.api.errors import register_error_handlers, ConfigurationError, DatabaseError
from controle_frete.database import (
    init_sqlalchemy,
    check_database_connection,
    dispose_sqlalchemy_engine,
)
from controle_frete.database.frete_repository import FreteRepository
from controle_frete.database.preco_repository import PrecoRepository
from controle_frete.services import FreteService, PrecoService, PortalSessionService
from controle_frete.utils.logger import logger, configure_logger

SERVICE_NAME = 'Controle de Frete API'
SERVICE_VERSION = '2.2.0'


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def create_app(config_object: Config) -> Flask:
    """
    Factory function to create and configure the Flask application with SQLAlchemy.

    Args:
        config_object: The configuration object for the application.

    Returns:
        The configured Flask application instance.
    """
    app = Flask("Controle-Frete")
    app.config.from_object(config_object)

    # --- Logging ---
    configure_logger(config_object.LOG_LEVEL)
    logger.info("Iniciando a aplicação Flask do Controle de Frete.")
    logger.info(f"Modo de depuração: {app.config.get('APP_DEBUG')}")

    # --- CORS Configuration ---
    CORS(
        app,
        resources={r"/api/*": {"origins": config_object.CORS_ORIGINS}},
        methods=['GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization', 'X-Session-Token'],
    )
    logger.info(f"CORS configurado para as origens: {config_object.CORS_ORIGINS}")

    # --- Request logging ---
    @app.before_request
    def log_request():
        logger.info(f"{request.method} {request.path}")

    # --- Database Initialization (SQLAlchemy) ---
    db_engine = None
    try:
        db_uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if not db_uri:
            raise ConfigurationError("SQLALCHEMY_DATABASE_URI não está configurado.")

        db_engine = init_sqlalchemy(db_uri)
        logger.info("Motor SQLAlchemy e fábrica de sessões inicializados com sucesso.")

        atexit.register(dispose_sqlalchemy_engine)
    except (DatabaseError, ConfigurationError, SQLAlchemyError) as db_init_err:
        logger.critical(f"Falha ao inicializar o banco de dados: {db_init_err}", exc_info=True)
        sys.exit(1)

    # --- Dependency Injection (Service Instantiation) ---
    logger.info("Instanciando serviços...")
    try:
        frete_repo = FreteRepository(db_engine)
        preco_repo = PrecoRepository(db_engine)
        app.config['frete_repository'] = frete_repo
        app.config['preco_repository'] = preco_repo

        app.config['frete_service'] = FreteService(frete_repo)
        app.config['preco_service'] = PrecoService(
            preco_repo,
            page_size=config_object.PRECOS_PAGE_SIZE,
            marcas_cache_ttl=config_object.MARCAS_CACHE_TTL,
        )
        app.config['session_service'] = PortalSessionService(
            config_object.PORTAL_URL, timeout=config_object.PORTAL_TIMEOUT
        )
        logger.info("Serviços instanciados e adicionados à configuração do aplicativo.")
    except Exception as service_init_err:
        logger.critical(f"Falha ao instanciar serviços: {service_init_err}", exc_info=True)
        sys.exit(1)

    # --- Register Blueprints (API Routes) ---
    register_blueprints(app)

    # --- Register Error Handlers ---
    register_error_handlers(app)

    # --- Public endpoints ---
    @app.route('/', methods=['GET'])
    def index():
        return jsonify({
            "status": "online",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "timestamp": _utc_timestamp(),
        }), 200

    @app.route('/health', methods=['GET'])
    def health_check():
        db_ok = True
        try:
            check_database_connection()
        except Exception as e:
            logger.error(f"Verificação de saúde do banco de dados falhou: {e}")
            db_ok = False

        return jsonify({
            "status": "healthy" if db_ok else "unhealthy",
            "database": "connected" if db_ok else "disconnected",
            "timestamp": _utc_timestamp(),
            "service": SERVICE_NAME,
        }), 200 if db_ok else 503

    logger.info("Aplicação Controle de Frete configurada com sucesso.")
    return app
