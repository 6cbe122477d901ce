"""Development settings for RestPod project.

This module extends the base settings with development specific
configuration, such as enabling debug and allowing all hosts. Do not use
these settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# Run beat tasks inline when no broker is running locally
CELERY_TASK_ALWAYS_EAGER = os.environ.get('CELERY_TASK_ALWAYS_EAGER', 'false').lower() == 'true'
