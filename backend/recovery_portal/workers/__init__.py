"""Background workers module.

Celery application, Beat schedule and worker logging setup.
"""

from .celery_app import celery_app

__all__ = ["celery_app"]
