"""Configuration module for the checkout Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '0') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    TESTING = False

    # Database - Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'checkout')
        DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'checkout')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'checkout')

        DATABASE_URL = (
            f"postgresql://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'

    # Stock validation
    LOW_STOCK_THRESHOLD = int(os.getenv('LOW_STOCK_THRESHOLD', '10'))

    # Shipping
    FREE_SHIPPING_THRESHOLD = os.getenv('FREE_SHIPPING_THRESHOLD', '99.00')
    DEFAULT_SHIPPING_FEE = os.getenv('DEFAULT_SHIPPING_FEE', '12.00')

    # Full reduction promotion ("spend X get Y off")
    FULL_REDUCTION_ENABLED = os.getenv('FULL_REDUCTION_ENABLED', 'true').lower() == 'true'
    FULL_REDUCTION_THRESHOLD = os.getenv('FULL_REDUCTION_THRESHOLD', '100.00')
    FULL_REDUCTION_AMOUNT = os.getenv('FULL_REDUCTION_AMOUNT', '10.00')
    FULL_REDUCTION_DESCRIPTION = os.getenv('FULL_REDUCTION_DESCRIPTION', 'Spend 100, get 10 off')

    # Coupons: empty prefix means the local provider accepts every code
    LOCAL_COUPON_PREFIX = os.getenv('LOCAL_COUPON_PREFIX', '')

    # Orders
    ORDER_AUTO_CANCEL_MINUTES = int(os.getenv('ORDER_AUTO_CANCEL_MINUTES', '30'))
    CURRENCY = os.getenv('CURRENCY', 'CNY')


class TestingConfig(Config):
    """Configuration used by the test suite (in-memory SQLite)."""

    TESTING = True
    DEBUG = False
    SECRET_KEY = 'testing-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ECHO = False
    FULL_REDUCTION_ENABLED = True
    FULL_REDUCTION_THRESHOLD = '100.00'
    FULL_REDUCTION_AMOUNT = '10.00'
    LOCAL_COUPON_PREFIX = ''
