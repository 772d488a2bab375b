"""
Development settings - локальная разработка
"""
from .settings import *  # noqa: F401,F403

DEBUG = True
ALLOWED_HOSTS = ['*']

STOREFRONT = {
    **STOREFRONT,  # noqa: F405
    'ENVIRONMENT': 'development',
    'SHOW_ZERO_STOCK_PRODUCTS': True,
}

# Email в консоль
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'
