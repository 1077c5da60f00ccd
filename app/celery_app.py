from celery import Celery
import os
import logging

logger = logging.getLogger(__name__)


def make_celery(app_name=__name__):
    redis_url = os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
    celery = Celery(
        app_name,
        broker=redis_url,
        backend=redis_url,
        include=['tasks']
    )

    celery.conf.update(
        task_serializer='json',
        accept_content=['json'],
        result_serializer='json',
        timezone='UTC',
        enable_utc=True,
        # One catalog request at a time per worker process
        worker_prefetch_multiplier=1,
        task_acks_late=True,
    )

    # Tests run tasks in-process
    if os.environ.get('CELERY_TASK_ALWAYS_EAGER', 'false').lower() == 'true':
        celery.conf.task_always_eager = True
        logger.debug("Celery running tasks eagerly")

    return celery


celery = make_celery('boardshelf')
