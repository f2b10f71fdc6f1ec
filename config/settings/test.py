"""Test settings.

In-memory SQLite, eager Celery and a fixed encryption key so that the
suite runs without external services.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

ENCRYPTION_KEY = 'test-encryption-key'

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

LOG_LEVEL = 'WARNING'
LOGGING["loggers"]["apps"]["level"] = LOG_LEVEL  # noqa: F405
LOGGING["loggers"]["shared"]["level"] = LOG_LEVEL  # noqa: F405
