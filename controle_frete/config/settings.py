# controle_frete/config/settings.py
# Loads environment variables and defines the application configuration.

from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv
import os
import logging
import sys
from urllib.parse import quote_plus # Para senhas na URL

# Determine the project root directory dynamically
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
dotenv_path = os.path.join(PROJECT_ROOT, '.env')
load_dotenv(dotenv_path=dotenv_path)

DEFAULT_PORTAL_URL = 'https://ir-comercio-portal-zcan.onrender.com'

def _env_list(name: str, default: str) -> List[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(',') if item.strip()]

@dataclass
class Config:
    """
    Application configuration loaded from environment variables.
    Provides type hints and default values.
    """
    # Flask Settings
    APP_HOST: str = field(default_factory=lambda: os.environ.get('APP_HOST', '0.0.0.0'))
    APP_PORT: int = field(default_factory=lambda: int(os.environ.get('PORT', os.environ.get('APP_PORT', 3000))))
    APP_DEBUG: bool = field(default_factory=lambda: os.environ.get('APP_DEBUG', 'False').lower() == 'true')
    LOG_LEVEL: str = field(default_factory=lambda: os.environ.get('LOG_LEVEL', 'INFO').upper())
    CORS_ORIGINS: List[str] = field(default_factory=lambda: _env_list('CORS_ORIGINS', '*'))

    # --- Database Settings ---
    DB_TYPE: str = field(default_factory=lambda: os.environ.get('DB_TYPE', 'POSTGRES').upper())

    # Direct connection string (Supabase exposes one per project); takes precedence when set
    DATABASE_URL: str = field(default_factory=lambda: os.environ.get('DATABASE_URL', ''))

    # PostgreSQL Specific Settings (read from .env)
    POSTGRES_HOST: str = field(default_factory=lambda: os.environ.get('POSTGRES_HOST', 'localhost'))
    POSTGRES_PORT: int = field(default_factory=lambda: int(os.environ.get('POSTGRES_PORT', 5432)))
    POSTGRES_USER: str = field(default_factory=lambda: os.environ.get('POSTGRES_USER', ''))
    POSTGRES_PASSWORD: str = field(default_factory=lambda: os.environ.get('POSTGRES_PASSWORD', ''))
    POSTGRES_DB: str = field(default_factory=lambda: os.environ.get('POSTGRES_DB', ''))

    # SQLite (local runs / tests)
    DATABASE_PATH: str = field(default_factory=lambda: os.environ.get('DATABASE_PATH', ''))

    # --- SQLAlchemy Database URL ---
    # Constructed based on the DB_TYPE and specific settings
    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    # --- Portal (session authority) ---
    PORTAL_URL: str = field(default_factory=lambda: os.environ.get('PORTAL_URL', DEFAULT_PORTAL_URL))
    PORTAL_TIMEOUT: int = field(default_factory=lambda: int(os.environ.get('PORTAL_TIMEOUT', 10)))

    # --- Client / sync loop ---
    API_URL: str = field(default_factory=lambda: os.environ.get('API_URL', 'http://localhost:3000/api'))
    REQUEST_TIMEOUT: int = field(default_factory=lambda: int(os.environ.get('REQUEST_TIMEOUT', 10)))
    HEARTBEAT_INTERVAL: int = field(default_factory=lambda: int(os.environ.get('HEARTBEAT_INTERVAL', 15)))
    FRETES_REFRESH_INTERVAL: int = field(default_factory=lambda: int(os.environ.get('FRETES_REFRESH_INTERVAL', 10)))
    PRECOS_REFRESH_INTERVAL: int = field(default_factory=lambda: int(os.environ.get('PRECOS_REFRESH_INTERVAL', 30)))
    PRECOS_PAGE_SIZE: int = field(default_factory=lambda: int(os.environ.get('PRECOS_PAGE_SIZE', 50)))
    MARCAS_CACHE_TTL: int = field(default_factory=lambda: int(os.environ.get('MARCAS_CACHE_TTL', 300)))

    def __post_init__(self):
        # Validate log level
        valid_levels = list(logging._nameToLevel.keys())
        if self.LOG_LEVEL not in valid_levels:
             print(f"Warning: Invalid LOG_LEVEL '{self.LOG_LEVEL}'. Valid levels: {valid_levels}. Defaulting to DEBUG.", file=sys.stderr)
             self.LOG_LEVEL = 'DEBUG'

        # --- Build SQLAlchemy Database URI ---
        if self.SQLALCHEMY_DATABASE_URI:
            pass
        elif self.DATABASE_URL:
            # Supabase/Heroku style URLs use the plain scheme; pin the psycopg driver
            url = self.DATABASE_URL
            if url.startswith('postgres://'):
                url = 'postgresql://' + url[len('postgres://'):]
            if url.startswith('postgresql://'):
                url = 'postgresql+psycopg://' + url[len('postgresql://'):]
            self.SQLALCHEMY_DATABASE_URI = url
        elif self.DB_TYPE == 'POSTGRES':
            if not all([self.POSTGRES_HOST, self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_DB]):
                print("Warning: Missing PostgreSQL connection details in environment variables. Database connection will likely fail.", file=sys.stderr)
                self.SQLALCHEMY_DATABASE_URI = None
            else:
                 encoded_password = quote_plus(self.POSTGRES_PASSWORD)
                 self.SQLALCHEMY_DATABASE_URI = f"postgresql+psycopg://{self.POSTGRES_USER}:{encoded_password}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        elif self.DB_TYPE == 'SQLITE':
             if self.DATABASE_PATH:
                  abs_path = os.path.join(PROJECT_ROOT, self.DATABASE_PATH) if not os.path.isabs(self.DATABASE_PATH) else self.DATABASE_PATH
                  os.makedirs(os.path.dirname(abs_path), exist_ok=True)
                  self.SQLALCHEMY_DATABASE_URI = f"sqlite:///{abs_path}"
             else:
                  print("Warning: DB_TYPE is SQLITE but DATABASE_PATH is not set.", file=sys.stderr)
                  self.SQLALCHEMY_DATABASE_URI = None
        else:
             print(f"Warning: Unsupported DB_TYPE '{self.DB_TYPE}'. No database URI configured.", file=sys.stderr)
             self.SQLALCHEMY_DATABASE_URI = None

        self.PORTAL_URL = self.PORTAL_URL.rstrip('/')
        self.API_URL = self.API_URL.rstrip('/')

        # Validate page size
        if self.PRECOS_PAGE_SIZE < 1:
            print(f"Warning: PRECOS_PAGE_SIZE ({self.PRECOS_PAGE_SIZE}) is invalid. Setting to default 50.", file=sys.stderr)
            self.PRECOS_PAGE_SIZE = 50
        elif self.PRECOS_PAGE_SIZE > 500:
            print(f"Warning: PRECOS_PAGE_SIZE ({self.PRECOS_PAGE_SIZE}) exceeds 500. Clamping to 500.", file=sys.stderr)
            self.PRECOS_PAGE_SIZE = 500

# Singleton instance, created by load_config
_config_instance: Optional[Config] = None

def load_config() -> Config:
    """Loads or returns the singleton Config instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
        # Log loaded config values (mask sensitive ones)
        print("--- Configuration Loaded ---")
        print(f"  APP_HOST: {_config_instance.APP_HOST}")
        print(f"  APP_PORT: {_config_instance.APP_PORT}")
        print(f"  APP_DEBUG: {_config_instance.APP_DEBUG}")
        print(f"  LOG_LEVEL: {_config_instance.LOG_LEVEL}")
        print(f"  DB_TYPE: {_config_instance.DB_TYPE}")
        print(f"  SQLALCHEMY_DATABASE_URI: {mask_database_uri(_config_instance.SQLALCHEMY_DATABASE_URI)}")
        print(f"  PORTAL_URL: {_config_instance.PORTAL_URL}")
        print(f"  API_URL: {_config_instance.API_URL}")
        print("--------------------------")
    return _config_instance

def mask_database_uri(uri: Optional[str]) -> str:
    """Replaces the password portion of a database URI with asterisks."""
    if not uri:
        return str(uri)
    scheme_sep = uri.find('://')
    at = uri.rfind('@')
    if scheme_sep == -1 or at == -1:
        return uri
    credentials = uri[scheme_sep + 3:at]
    if ':' not in credentials:
        return uri
    user = credentials.split(':', 1)[0]
    return f"{uri[:scheme_sep + 3]}{user}:********{uri[at:]}"

# Expose the singleton instance directly
config = load_config()

def get_project_root() -> str:
    return PROJECT_ROOT
