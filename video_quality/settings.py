"""
Django settings for the video_quality project
"""

from pathlib import Path

from decouple import config, Csv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config('SECRET_KEY', default='django-insecure-video-quality-dev-key')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = config('DEBUG', default=False, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='*', cast=Csv())

# Application definition
INSTALLED_APPS = [
    'detector',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'video_quality.urls'

WSGI_APPLICATION = 'video_quality.wsgi.application'

# The detector keeps no state between requests
DATABASES = {}

# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# File Upload Settings
FILE_UPLOAD_MAX_MEMORY_SIZE = 52428800  # 50 MB

# Detection pipeline (see detector.config.DetectionConfig)
VIDEO_QUALITY = {
    'MAX_UPLOAD_BYTES': config('MAX_UPLOAD_BYTES', default=1024 * 1024 * 1024, cast=int),
    'SAMPLE_COUNT': config('SAMPLE_COUNT', default=10, cast=int),
    'VARIANCE_VOLATILITY_THRESHOLD': config('VARIANCE_VOLATILITY_THRESHOLD', default=5000.0, cast=float),
    'MAX_VARIANCE_CHANGE_THRESHOLD': config('MAX_VARIANCE_CHANGE_THRESHOLD', default=10000.0, cast=float),
    'FRAME_VOTE_FRACTION': config('FRAME_VOTE_FRACTION', default=0.3, cast=float),
    'MAX_FRAMES': config('MAX_FRAMES', default=5, cast=int),
    'FRAME_TIMEOUT': config('FRAME_TIMEOUT', default=30.0, cast=float),
    'LOCAL_MODEL_ENABLED': config('LOCAL_MODEL_ENABLED', default=False, cast=bool),
    'HF_API_KEY': config('HF_API_KEY', default=''),
    'HF_MODEL': config('HF_MODEL', default='google/vit-base-patch16-224'),
}

# Logging
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'detector': {
            'handlers': ['console'],
            'level': config('DETECTOR_LOG_LEVEL', default='INFO'),
            'propagate': False,
        },
    },
}
