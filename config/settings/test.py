"""Test settings for RestPod project.

Uses an in-memory SQLite database, runs Celery tasks eagerly and supplies
dummy Razorpay credentials so the payment services can be exercised with the
provider HTTP calls patched out.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

RAZORPAY_KEY_ID = 'rzp_test_key0000000000'
RAZORPAY_KEY_SECRET = 'test_secret_for_signatures'
RAZORPAY_API_BASE_URL = 'https://api.razorpay.test/v1/'

UPI_RECIPIENT_ID = 'restpod@ybl'
