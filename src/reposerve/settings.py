# Django settings for the reposerve project.

import logging
import os
import sys

def env_override(key, default_value):
    """
    Macro to check environment for overriding default values
    """
    if key in os.environ:
        return os.environ[key]
    else:
        return default_value


# YAML configuration of the repository daemon (see reposerve.apkrepo.config)
REPOSERVE_CONFIG = env_override('REPOSERVE_CONFIG', '/etc/reposerve.yaml')
REPOSERVE_VAR_ROOT = env_override('REPOSERVE_VAR_ROOT', '/var/lib/reposerve')

# set the appropriate Debug level
REPOSERVE_DEBUG = env_override('REPOSERVE_DEBUG', '').lower().split()
DEBUG = 'true' in REPOSERVE_DEBUG

ALLOWED_HOSTS = env_override('REPOSERVE_ALLOWED_HOSTS', '*').split()

# Make this unique, and don't share it with anybody.
SECRET_KEY = env_override('REPOSERVE_SECRET_KEY', 'reposerve-insecure-0c4e8b1d7a')

# The repository tree is the only state; no database is used.
DATABASES = {}

TIME_ZONE = 'UTC'
USE_TZ = True
LANGUAGE_CODE = env_override('REPOSERVE_LANGUAGE', 'en-us')
USE_I18N = True

INSTALLED_APPS = [
    'reposerve.apkrepo.apps.ApkRepoConfig',
]

# HTTPS redirect and HSTS follow the tls section of REPOSERVE_CONFIG
MIDDLEWARE = [
    'reposerve.apkrepo.middleware.TlsSecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'reposerve.urls'
ASGI_APPLICATION = 'reposerve.asgi.application'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {},
    },
]

# /upload replaces these with a per-request staging handler
FILE_UPLOAD_HANDLERS = [
    'django.core.files.uploadhandler.TemporaryFileUploadHandler',
]
DATA_UPLOAD_MAX_NUMBER_FILES = int(env_override('REPOSERVE_MAX_UPLOAD_FILES', '100'))

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'TIMEOUT': 3600,
    }
}

class LevelLessThan(logging.Filter):
    """
    Logging filter class to include all INFO and DEBUG messages
    """
    def __init__(self, max_level):
        self.max_level = max_level

    def filter(self, record):
        return record.levelno <= self.max_level

# logging configuration
REPOSERVE_LOGHANDLERS = env_override('REPOSERVE_LOGHANDLERS', 'console_stdout console_stderr').lower().split()
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s pid=%(process)d tid=%(thread)d module=%(module)s %(levelname)s:  %(message)s'
        },
        'message_only': {
            'format': '%(message)s'
        },
        'level_and_message' : {
            'format': '%(levelname)s %(message)s'
        }
    },
    'filters' : {
        'info_and_lower' : {
            '()': 'reposerve.settings.LevelLessThan',
            'max_level' : logging.INFO,
        }
    },
    'handlers' : {
        'console_stdout' : {
            'level': 'DEBUG',
            'class': 'logging.StreamHandler',
            'filters': ['info_and_lower'],
            'formatter': 'level_and_message' if DEBUG else 'message_only',
            'stream'  : sys.stdout,
        },
        'console_stderr' : {
            'level': 'WARNING',
            'class': 'logging.StreamHandler',
            'formatter': 'level_and_message',
            'stream'  : sys.stderr,
        },
        'file' : {
            'level': 'INFO',
            'class': 'logging.handlers.TimedRotatingFileHandler',
            'formatter': 'verbose',
            'filename': os.path.join(REPOSERVE_VAR_ROOT, 'log', 'reposerve.log'),
            'when': 'D',
            'backupCount': 7,
            'delay': True,
        },
    },
    'loggers': {
        'reposerve' : {
            'handlers' : REPOSERVE_LOGHANDLERS,
            'propagate': False,
            'level': 'DEBUG' if DEBUG else 'INFO',
        },
        'hypercorn.access' : {
            'handlers': REPOSERVE_LOGHANDLERS,
            'propagate': False,
            'level': 'INFO',
        },
        'hypercorn.error' : {
            'handlers': REPOSERVE_LOGHANDLERS,
            'propagate': False,
            'level': 'INFO',
        },
    }
}

DEFAULT_LOGGER = 'reposerve'
