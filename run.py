# run.py
# Sobe a API do controle de fretes (servidor de desenvolvimento do Flask).
# Uso: python run.py   (host/porta em APP_HOST/PORT, banco em DATABASE_URL ou POSTGRES_*)
import sys

from controle_frete.app import create_app
from controle_frete.config.settings import load_config
from controle_frete.utils.logger import logger


def main() -> int:
    config = load_config()
    app = create_app(config)
    logger.info(f"API do Controle de Frete ouvindo em {config.APP_HOST}:{config.APP_PORT}")
    try:
        app.run(host=config.APP_HOST, port=config.APP_PORT, debug=config.APP_DEBUG, use_reloader=False)
    except OSError as e:
        logger.critical(f"Não foi possível abrir a porta {config.APP_PORT}: {e}", exc_info=True)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
