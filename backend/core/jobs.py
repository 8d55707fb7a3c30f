"""
Daily business checks, run from cron through ``manage.py run_daily_jobs``
(0 9 * * *). Each job returns the number of rows it acted on.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from backend.catalog.models import Product
from backend.core.models import Notification
from backend.core.utils import create_notification
from backend.inventory.services import notify_low_stock
from backend.sales.models import Invoice

logger = logging.getLogger('backend.jobs')

UNPAID_EXCLUDED = ('paid', 'cancelled')
OVERDUE_TITLE = 'Overdue Invoice'
UPCOMING_TITLE = 'Upcoming Due Date'


def _invoice_url(invoice):
    return f"/sales/invoices/{invoice.pk}"


def _client_name(invoice):
    client = invoice.client
    if client is None:
        return 'Unknown Client'
    return client.company or client.name or 'Unknown Client'


def _unpaid_invoices():
    return Invoice.objects.select_related('client').exclude(status__in=UNPAID_EXCLUDED).filter(due_date__isnull=False)


def check_overdue_invoices(today=None):
    today = today or timezone.localdate()
    created = 0
    for invoice in _unpaid_invoices().filter(due_date__lt=today):
        already_pending = Notification.objects.filter(
            title=OVERDUE_TITLE, action_url=_invoice_url(invoice), read=False
        ).exists()
        if already_pending:
            continue
        days_overdue = (today - invoice.due_date).days
        create_notification(
            title=OVERDUE_TITLE,
            message=f"Invoice {invoice.document_id} for {_client_name(invoice)} is overdue by {days_overdue} days.",
            type='warning',
            action_url=_invoice_url(invoice),
            action_label='View Invoice',
        )
        created += 1
    logger.info(f"Checked overdue invoices: {created} notification(s) created")
    return created


def check_upcoming_due_dates(today=None, days=None):
    today = today or timezone.localdate()
    days = days or settings.UPCOMING_DUE_DAYS
    created = 0
    for invoice in _unpaid_invoices().filter(due_date=today + timedelta(days=days)):
        create_notification(
            title=UPCOMING_TITLE,
            message=f"Invoice {invoice.document_id} for {_client_name(invoice)} is due in {days} days.",
            type='info',
            action_url=_invoice_url(invoice),
            action_label='View Invoice',
        )
        created += 1
    logger.info(f"Checked upcoming due dates: {created} reminder(s) created")
    return created


def check_low_stock():
    created = 0
    for product in Product.objects.filter(is_deleted=False, min_stock__gt=0):
        if notify_low_stock(product) is not None:
            created += 1
    logger.info(f"Checked low stock: {created} alert(s) created")
    return created


def cleanup_old_notifications(days=None):
    days = days or settings.NOTIFICATION_RETENTION_DAYS
    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = Notification.objects.filter(created_at__lt=cutoff).delete()
    logger.info(f"Cleaned up {deleted} notification(s) older than {days} days")
    return deleted


DAILY_JOBS = {
    'overdue': check_overdue_invoices,
    'upcoming': check_upcoming_due_dates,
    'low_stock': check_low_stock,
    'cleanup': cleanup_old_notifications,
}


def run_daily_jobs(only=None):
    """
    Run every job (or only the named ones) and return {name: result}.

    A failing job is logged with its traceback and reported as None; the
    remaining jobs still run.
    """
    results = {}
    for name, job in DAILY_JOBS.items():
        if only and name not in only:
            continue
        try:
            results[name] = job()
        except Exception:
            logger.exception(f"Daily job {name} failed")
            results[name] = None
    return results
