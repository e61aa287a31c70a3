import os
from datetime import timedelta
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'sarrafi-backoffice-dev-key'

    # Ensure instance directory exists
    instance_path = os.path.join(basedir, 'instance')
    os.makedirs(instance_path, exist_ok=True)

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(instance_path, 'sarrafi.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Forms double as the JSON API validators; clients fetch a token from /auth/csrf-token
    WTF_CSRF_ENABLED = os.environ.get('WTF_CSRF_ENABLED', 'true').lower() != 'false'

    # Session settings
    PERMANENT_SESSION_LIFETIME = timedelta(hours=12)
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE') or os.path.join(basedir, 'logs', 'sarrafi.log')

    # Pagination
    ITEMS_PER_PAGE = int(os.environ.get('ITEMS_PER_PAGE', 20))
    ACTIVITY_FEED_SIZE = 50

    # Currency settings
    DEFAULT_CURRENCY = 'USD'
    CURRENCIES = ['AFN', 'USD', 'PKR', 'EUR', 'IRT_BANK', 'IRT_CASH']

    # Customer that parks account transfers until the real receiver is known
    SUSPENSE_ACCOUNT_CODE = 'SUSPENSE'

    PROVINCES = sorted([
        "ارزگان", "بادغیس", "بامیان", "بدخشان", "بغلان", "بلخ", "پروان", "پکتیا",
        "پکتیکا", "پنجشیر", "تخار", "جوزجان", "خوست", "دایکندی", "زابل", "سرپل",
        "سمنگان", "غزنی", "غور", "فاریاب", "فراه", "کابل", "کاپیسا", "کندز",
        "کندهار", "کنر", "لغمان", "لوگر", "ننگرهار", "نورستان", "نیمروز", "هرات",
        "هلمند", "وردک"
    ])


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    LOG_FILE = None
