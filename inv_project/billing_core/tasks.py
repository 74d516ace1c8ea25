from celery import shared_task


@shared_task  # register this function as a Celery task
def purge_expired_companies_task():
    # import lazily to avoid circular imports at module import time
    from .services.customers import purge_expired_companies

    # hard delete junk customers whose restore window has passed
    return purge_expired_companies()
