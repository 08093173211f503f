"""Configuration module for the Flask application."""
import os
from decimal import Decimal
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Database - Support multiple environment variable naming conventions
    # Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'panaderia')
        DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'panaderia')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'panaderia')

        DATABASE_URL = (
            f"postgresql://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', '0') == '1'

    # Currencies: internal totals are always kept in BASE_CURRENCY cents
    BASE_CURRENCY = os.getenv('BASE_CURRENCY', 'NIO').strip().upper()
    FOREIGN_CURRENCY = os.getenv('FOREIGN_CURRENCY', 'USD').strip().upper()

    # Fallback rate used when a foreign payment omits its own rate and the
    # store has no rate configured
    DEFAULT_EXCHANGE_RATE = Decimal(os.getenv('TASA_CAMBIO_BASE', '36.62'))


class TestConfig(Config):
    """Configuration used by the test-suite (in-memory SQLite)."""

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
    DEFAULT_EXCHANGE_RATE = Decimal('36.50')
