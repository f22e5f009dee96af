from .settings import *

DEBUG = True

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db_test.sqlite3',
    }
}

# cron entries are not installed during tests
INSTALLED_APPS = [app for app in INSTALLED_APPS if app != 'django_crontab']

# Speed up tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

SMS_GATEWAY_API_KEY = ""
