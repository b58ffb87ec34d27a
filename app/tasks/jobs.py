from app.tasks.celery_app import celery
from app.tasks import worker_jobs


@celery.task(name="app.tasks.jobs.append_sheet_row")
def append_sheet_row(row: list[str]):
    return worker_jobs.append_sheet_row(row)
