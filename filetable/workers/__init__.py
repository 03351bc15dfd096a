"""
Celery workers module.

Background processing for file analysis. The file-analysis queue is
consumed with worker_concurrency set to the file analysis ceiling and
a prefetch of one, so a worker never holds more runs than it executes.

Dependencies: celery, filetable.configs
System role: Background task processing
"""

from celery import Celery, signals

from filetable.configs import get_settings
from filetable.observability.logger import configure_logging

settings = get_settings()
celery_config = settings.celery

FILE_ANALYSIS_TASK = "filetable.workers.tasks.file_analysis.process_workflow_file"

celery_app = Celery(
    settings.service_name,
    broker=celery_config.broker_url,
    backend=celery_config.result_backend_url,
    include=["filetable.workers.tasks.file_analysis"],
)

celery_app.conf.update(
    task_serializer=celery_config.task_serializer,
    result_serializer=celery_config.result_serializer,
    accept_content=celery_config.accept_content,
    timezone=celery_config.timezone,
    task_routes={FILE_ANALYSIS_TASK: {"queue": celery_config.file_analysis_queue}},
    worker_concurrency=celery_config.file_analysis_concurrency,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
)


@signals.setup_logging.connect
def _setup_logging(**kwargs) -> None:
    configure_logging(settings.log_level)
