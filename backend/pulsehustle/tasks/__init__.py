"""
Celery Task Modules

- matching.py: AI matching job processing
"""

from pulsehustle.tasks.matching import process_matching_job_task, run_matching_job

__all__ = [
    "process_matching_job_task",
    "run_matching_job",
]
