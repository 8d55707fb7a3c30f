"""
Document numbering in the format PREFIX-MM/YY/NNNN (e.g. FC-01/26/0001).

The serial restarts every month per prefix. The next number is computed from
the highest serial already stored for the same prefix, month and year.
"""
import logging
import re
from datetime import date, datetime

from django.apps import apps
from django.db import connection
from django.utils import timezone

logger = logging.getLogger(__name__)

DOCUMENT_PREFIXES = {
    'invoice': 'FC',
    'estimate': 'DV',
    'purchase_order': 'BC',
    'delivery_note': 'BL',
    'credit_note': 'AV',
    'statement': 'RL',
    'purchase_invoice': 'FA',
    'divers': 'DIV',
    'prelevement': 'PRL',
}

PREFIX_TO_TYPE = {prefix: doc_type for doc_type, prefix in DOCUMENT_PREFIXES.items()}

# doc type -> (app label, model name, extra filters)
DOCUMENT_MODELS = {
    'invoice': ('sales', 'Invoice', {}),
    'estimate': ('sales', 'Estimate', {}),
    'delivery_note': ('sales', 'DeliveryNote', {'document_type': 'delivery_note'}),
    'divers': ('sales', 'DeliveryNote', {'document_type': 'divers'}),
    'credit_note': ('sales', 'CreditNote', {}),
    'prelevement': ('sales', 'Prelevement', {}),
    'purchase_order': ('purchasing', 'PurchaseOrder', {}),
    'purchase_invoice': ('purchasing', 'PurchaseInvoice', {}),
}

DOCUMENT_NUMBER_RE = re.compile(r'^([A-Z]+)-(\d{2})/(\d{2})/(\d{4})$')


def get_prefix(document_type):
    try:
        return DOCUMENT_PREFIXES[document_type]
    except KeyError:
        raise ValueError(f"Unknown document type: {document_type}")


def _as_date(value):
    if value is None:
        return timezone.localdate()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()


def format_document_number(document_type, document_date, serial):
    document_date = _as_date(document_date)
    prefix = get_prefix(document_type)
    return f"{prefix}-{document_date:%m}/{document_date:%y}/{int(serial):04d}"


def parse_document_number(document_id):
    """Split a document number into its parts, or None if it is not one"""
    if not document_id:
        return None
    match = DOCUMENT_NUMBER_RE.match(str(document_id))
    if not match:
        return None
    return {
        'prefix': match.group(1),
        'month': match.group(2),
        'year': match.group(3),
        'serial': match.group(4),
    }


def is_valid_document_number(document_id):
    return parse_document_number(document_id) is not None


def get_document_type_from_number(document_id):
    parsed = parse_document_number(document_id)
    if not parsed:
        return None
    return PREFIX_TO_TYPE.get(parsed['prefix'])


def get_document_queryset(document_type):
    try:
        app_label, model_name, filters = DOCUMENT_MODELS[document_type]
    except KeyError:
        raise ValueError(f"Document type has no table: {document_type}")
    model = apps.get_model(app_label, model_name)
    return model.objects.filter(**filters)


def get_next_serial(document_type, document_date=None):
    document_date = _as_date(document_date)
    stem = format_document_number(document_type, document_date, 0)[:-4]

    queryset = get_document_queryset(document_type).filter(document_id__startswith=stem)
    # Lock matching rows so concurrent creations in the same month serialize
    if connection.in_atomic_block:
        queryset = queryset.select_for_update()

    max_serial = 0
    for document_id in queryset.values_list('document_id', flat=True):
        parsed = parse_document_number(document_id)
        if parsed:
            max_serial = max(max_serial, int(parsed['serial']))
    return max_serial + 1


def generate_document_number(document_type, document_date=None):
    """Next free number for this document type in the month of ``document_date``"""
    serial = get_next_serial(document_type, document_date)
    number = format_document_number(document_type, document_date, serial)
    logger.debug(f"Generated document number {number} for {document_type}")
    return number


def document_number_exists(document_type, document_id, exclude_pk=None):
    queryset = get_document_queryset(document_type).model.objects.filter(document_id=document_id)
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)
    return queryset.exists()
