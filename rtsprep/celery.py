# rtsprep/celery.py

from celery import Celery
from kombu import Queue, Exchange

from rtsprep.configmanager import queue_config

CELERY_APP_NAME = 'rtsprep'

app = Celery(
    CELERY_APP_NAME,
    broker=queue_config.broker_uri,
    backend=queue_config.result_backend_uri,
    include=['rtsprep.tasks.pipeline_tasks']
)

app.conf.update(
    result_expires=7200,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=20,
    task_serializer='json',
    broker_connection_retry=True,
    broker_connection_retry_on_startup=True,
)

app.conf.task_queues = (
    Queue(queue_config.prefix, Exchange(queue_config.prefix), routing_key=queue_config.prefix),
)
app.conf.task_default_queue = queue_config.prefix
app.conf.task_default_exchange = queue_config.prefix
app.conf.task_default_routing_key = queue_config.prefix

if __name__ == '__main__':
    app.start()
