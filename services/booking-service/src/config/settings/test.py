# services/booking-service/src/config/settings/test.py
"""
Test Settings

Django settings for running tests.
"""

import os
import tempfile

from .base import *

# Test mode
DEBUG = False
TESTING = True

# File-backed SQLite so threaded tests get their own connections.
# IMMEDIATE transactions take the write lock at BEGIN and wait on it.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'OPTIONS': {
            'transaction_mode': 'IMMEDIATE',
            'timeout': 20,
        },
        'TEST': {
            'NAME': os.path.join(tempfile.gettempdir(), 'petspa_booking_test.sqlite3'),
        },
    }
}

# Disable password hashers for faster tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]


# Disable migrations for faster tests
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None


MIGRATION_MODULES = DisableMigrations()

# Use local memory cache
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    },
}

# Email backend for testing
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
BUSINESS_NOTIFICATION_EMAIL = 'front-desk@example.com'
DEFAULT_FROM_EMAIL = 'bookings@example.com'

# Run Celery tasks inline
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = None

BOOKING_OPERATING_RULES = {
    'open_time': '08:00',
    'close_time': '17:00',
    'slot_minutes': 30,
    'closed_weekdays': [6, 0],
}
BOOKING_AUTO_CONFIRM = True
BOOKING_CODE_PREFIX = 'PS'

ERROR_ALERT_WEBHOOK_URL = ''
EVENT_PUBLISHING_ENABLED = True
EVENT_BACKEND = 'celery'

# Logging - minimal output during tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'CRITICAL',
    },
    'loggers': {
        'django': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
        'apps': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
    },
}

# CORS - allow all for testing
CORS_ALLOW_ALL_ORIGINS = True
