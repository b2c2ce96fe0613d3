from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent  # Assuming this file is in savings_router/tests/

SECRET_KEY = 'dummy-secret-key-for-testing-savings-router'
DEBUG = False
TESTING = True

ALLOWED_HOSTS = ['testserver', 'localhost', '127.0.0.1']

# The router has no models; the in-memory database only satisfies Django's checks
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.staticfiles',
    'rest_framework',
    'drf_yasg',
    'savings_router',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'savings_router.api.urls'  # Point to app's API URLs for isolated view testing

STATIC_URL = '/static/'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'UNAUTHENTICATED_USER': None,
}

# Cache settings for tests; locmem so the result cache can be exercised
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'savings-router-test-cache',
    }
}
SAVINGS_ROUTER_RESULT_CACHE_TIMEOUT = 60

# Picked up by SolveConfig.from_settings
SAVINGS_ROUTER_N_OF_ROADS = 3

LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'savings_router': {
            'handlers': ['console'],
            'level': 'DEBUG',
            'propagate': False,
        },
    }
}
