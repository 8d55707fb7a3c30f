"""
Translation between the status names shown in the frontend and the ones
stored on each document table.
"""

UI_TO_DB = {
    'invoice': {
        'draft': 'draft',
        'pending': 'sent',
        'sent': 'sent',
        'partially_paid': 'partially_paid',
        'paid': 'paid',
        'overdue': 'overdue',
        'cancelled': 'cancelled',
    },
    'estimate': {
        'draft': 'draft',
        'sent': 'sent',
        'accepted': 'accepted',
        'rejected': 'rejected',
        'expired': 'expired',
        'cancelled': 'rejected',
    },
    'delivery_note': {
        'draft': 'draft',
        'pending': 'draft',
        'in_transit': 'draft',
        'delivered': 'delivered',
        'cancelled': 'cancelled',
    },
    'credit_note': {
        'draft': 'draft',
        'pending': 'sent',
        'sent': 'sent',
        'approved': 'applied',
        'applied': 'applied',
        'cancelled': 'cancelled',
    },
    'prelevement': {
        'draft': 'draft',
        'pending': 'draft',
        'validated': 'validated',
        'cancelled': 'cancelled',
    },
    'purchase_order': {
        'draft': 'draft',
        'pending': 'sent',
        'sent': 'sent',
        'shipped': 'confirmed',
        'confirmed': 'confirmed',
        'received': 'received',
        'cancelled': 'cancelled',
    },
    'purchase_invoice': {
        'draft': 'draft',
        'pending': 'received',
        'received': 'received',
        'partially_paid': 'partially_paid',
        'paid': 'paid',
        'overdue': 'overdue',
        'cancelled': 'cancelled',
    },
}

DB_TO_UI = {
    'invoice': {'sent': 'pending'},
    'estimate': {'rejected': 'cancelled'},
    'delivery_note': {'draft': 'pending'},
    'credit_note': {'sent': 'pending', 'applied': 'approved'},
    'prelevement': {'draft': 'pending'},
    'purchase_order': {'draft': 'pending', 'sent': 'pending', 'confirmed': 'shipped'},
    'purchase_invoice': {'draft': 'pending', 'received': 'pending'},
}

# divers documents live with delivery notes
UI_TO_DB['divers'] = UI_TO_DB['delivery_note']
DB_TO_UI['divers'] = DB_TO_UI['delivery_note']


def to_db_status(document_type, ui_status):
    """Map a UI status to the stored value; unknown values fall back to draft"""
    mapping = UI_TO_DB.get(document_type)
    if mapping is None:
        raise ValueError(f"Unknown document type: {document_type}")
    if not ui_status:
        return 'draft'
    return mapping.get(str(ui_status).lower(), 'draft')


def to_ui_status(document_type, db_status):
    mapping = DB_TO_UI.get(document_type, {})
    if not db_status:
        return db_status
    return mapping.get(str(db_status).lower(), db_status)


def is_known_status(document_type, status):
    return str(status).lower() in UI_TO_DB.get(document_type, {})


def resolve_status(document_type, status, stored_choices):
    """
    Stored status for a value sent by a client, which may already be a stored
    name or a UI name. Returns None for values that are neither.
    """
    if status is None:
        return None
    value = str(status).strip().lower()
    if value in stored_choices:
        return value
    if is_known_status(document_type, value):
        return to_db_status(document_type, value)
    return None
