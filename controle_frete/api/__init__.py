# controle_frete/api/__init__.py
# Initializes the API layer and registers blueprints.
# Routes are imported inside register_blueprints (services import api.errors).

from flask import Flask

from controle_frete.utils.logger import logger

def register_blueprints(app: Flask):
    """
    Registers all defined blueprints with the Flask application.

    Args:
        app: The Flask application instance.
    """
    from .routes.fretes import fretes_bp
    from .routes.precos import precos_bp

    # Lista de blueprints para registrar
    blueprints = [
        (fretes_bp, '/api'),
        (precos_bp, '/api'),
    ]

    logger.info("Registering API blueprints...")
    for bp, prefix in blueprints:
        app.register_blueprint(bp, url_prefix=prefix)
        logger.debug(f"Blueprint '{bp.name}' registered with prefix '{prefix}'.")
    logger.info("All API blueprints registered.")

__all__ = ["register_blueprints"]
