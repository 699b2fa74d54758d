# controle_frete/utils/logger.py
# Logger único da aplicação: console + arquivo rotativo seguro entre processos
# (o servidor e o monitor do terminal podem gravar no mesmo diretório de logs).

import logging
import os
import sys
from typing import Optional, Tuple

from concurrent_log_handler import ConcurrentRotatingFileHandler

LOGGER_NAME = "ControleFreteAPI"
LOG_DIRECTORY = os.environ.get(
    'LOG_DIR',
    os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "logs"),
)
LOG_FILENAME = os.environ.get('LOG_FILE', "controle_frete.log")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s %(filename)s:%(lineno)d] - %(message)s'
LOG_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 10

# Bibliotecas de terceiros que poluem o log em DEBUG (requests/urllib3 a cada heartbeat)
NOISY_LOGGERS = ('urllib3', 'werkzeug', 'sqlalchemy.engine')


def _resolve_level(level: Optional[str]) -> Tuple[int, str]:
    name = (level or os.environ.get('LOG_LEVEL') or 'INFO').upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        print(f"Aviso: Nível de log inválido '{name}'. Usando DEBUG.", file=sys.stderr)
        return logging.DEBUG, 'DEBUG'
    return numeric, name


def _file_logging_enabled() -> bool:
    return os.environ.get('LOG_TO_FILE', 'true').lower() == 'true'


def _attach_handlers(target: logging.Logger):
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    target.addHandler(console)

    if not _file_logging_enabled():
        return
    try:
        os.makedirs(LOG_DIRECTORY, exist_ok=True)
        path = os.path.join(LOG_DIRECTORY, LOG_FILENAME)
        file_handler = ConcurrentRotatingFileHandler(
            filename=path,
            mode='a',
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding='utf-8',
        )
        file_handler.setFormatter(formatter)
        target.addHandler(file_handler)
    except OSError as e:
        print(f"Erro ao configurar log em arquivo ({LOG_DIRECTORY}): {e}", file=sys.stderr)


def _quiet_third_party(numeric: int):
    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(numeric, logging.WARNING))


def _build_logger(level: Optional[str] = None) -> logging.Logger:
    target = logging.getLogger(LOGGER_NAME)
    numeric, _ = _resolve_level(level)
    target.setLevel(numeric)
    target.propagate = False
    if not target.handlers:
        _attach_handlers(target)
    _quiet_third_party(numeric)
    return target


logger = _build_logger()


def configure_logger(level: str) -> logging.Logger:
    """Aplica o nível configurado (Config.LOG_LEVEL) ao logger global, sem duplicar handlers."""
    numeric, name = _resolve_level(level)
    logger.setLevel(numeric)
    _quiet_third_party(numeric)
    logger.debug(f"Nível de log ajustado para {name}.")
    return logger
