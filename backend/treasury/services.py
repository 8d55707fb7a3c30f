"""
Treasury bookkeeping.

A payment only moves money once it is ``cleared``: sales payments credit
their bank account (or the warehouse cash box when no account is set),
purchase payments debit it. Leaving the cleared state, or deleting a cleared
payment, reverses the movement.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone

from .models import BankAccount, WarehouseCash, Payment

logger = logging.getLogger(__name__)

CLEARED = 'cleared'
IMMEDIATE_METHODS = ('cash', 'bank_transfer')


def initial_payment_status(payment_method):
    """Cash and transfers are received immediately; checks wait in hand"""
    return CLEARED if payment_method in IMMEDIATE_METHODS else 'in-hand'


def _signed_amount(payment):
    amount = Decimal(payment.amount)
    return amount if payment.payment_type == 'sales' else -amount


@transaction.atomic
def adjust_warehouse_cash(warehouse, delta):
    cash, _ = WarehouseCash.objects.select_for_update().get_or_create(
        warehouse=warehouse,
        defaults={'amount': Decimal('0.00')},
    )
    cash.amount = cash.amount + Decimal(delta)
    cash.save(update_fields=['amount', 'updated_at'])
    return cash


def apply_balance_effect(payment, reverse=False):
    """Move a cleared payment's amount into (or back out of) its account"""
    delta = _signed_amount(payment)
    if reverse:
        delta = -delta

    if payment.bank_account_id:
        BankAccount.objects.filter(pk=payment.bank_account_id).update(
            balance=F('balance') + delta,
            updated_at=timezone.now(),
        )
        logger.info(f"Bank account {payment.bank_account_id} balance {delta:+} ({payment.invoice_number})")
    elif payment.warehouse_id:
        adjust_warehouse_cash(payment.warehouse, delta)
        logger.info(f"Warehouse {payment.warehouse_id} cash {delta:+} ({payment.invoice_number})")
    else:
        logger.debug(f"Payment {payment.pk} has no account to update")


@transaction.atomic
def record_payment(payment_type, invoice_number, entity, amount, payment_method=None, status=None,
                   bank_account=None, warehouse=None, check_number=None, bank=None,
                   maturity_date=None, payment_date=None, sales_invoice=None,
                   purchase_invoice=None, notes=None):
    """Create a payment and book it when it is already cleared"""
    payment_method = payment_method or 'bank_transfer'
    payment = Payment.objects.create(
        payment_type=payment_type,
        invoice_number=invoice_number,
        entity=entity or 'Unknown',
        amount=amount,
        payment_method=payment_method,
        status=status or initial_payment_status(payment_method),
        bank_account=bank_account,
        warehouse=warehouse,
        check_number=check_number if payment_method == 'check' else None,
        bank=bank,
        maturity_date=maturity_date,
        payment_date=payment_date or timezone.localdate(),
        sales_invoice=sales_invoice,
        purchase_invoice=purchase_invoice,
        notes=notes,
    )
    if payment.status == CLEARED:
        apply_balance_effect(payment)
    logger.info(f"Recorded {payment_type} payment {payment.amount} for {invoice_number} ({payment.status})")
    return payment


@transaction.atomic
def change_payment_status(payment, new_status):
    """Update status, booking or reversing the amount when it crosses 'cleared'"""
    old_status = payment.status
    if old_status == new_status:
        return payment
    payment.status = new_status
    payment.save(update_fields=['status', 'updated_at'])
    if new_status == CLEARED:
        apply_balance_effect(payment)
    elif old_status == CLEARED:
        apply_balance_effect(payment, reverse=True)
    return payment


@transaction.atomic
def update_payment(payment, changes):
    """Apply field changes; a cleared payment is re-booked with its new amount and account"""
    if payment.status == CLEARED:
        apply_balance_effect(payment, reverse=True)
    for field, value in changes.items():
        setattr(payment, field, value)
    payment.save()
    if payment.status == CLEARED:
        apply_balance_effect(payment)
    return payment


def link_invoice(payment_type, invoice_number):
    """Invoice FK kwargs for a payment given its document number"""
    if payment_type == 'sales':
        from backend.sales.models import Invoice
        return {'sales_invoice': Invoice.objects.filter(document_id=invoice_number).first()}
    from backend.purchasing.models import PurchaseInvoice
    return {'purchase_invoice': PurchaseInvoice.objects.filter(document_id=invoice_number).first()}


@transaction.atomic
def delete_payment(payment):
    if payment.status == CLEARED:
        apply_balance_effect(payment, reverse=True)
    payment.delete()


@transaction.atomic
def delete_payments(queryset):
    """Delete payments, reversing the cleared ones; returns how many were removed"""
    count = 0
    for payment in queryset.select_related('bank_account', 'warehouse'):
        delete_payment(payment)
        count += 1
    return count


def treasury_summary():
    def total(queryset, field):
        return queryset.aggregate(total=Sum(field))['total'] or Decimal('0.00')

    return {
        'total_bank_balance': total(BankAccount.objects.all(), 'balance'),
        'total_warehouse_cash': total(WarehouseCash.objects.all(), 'amount'),
        'checks_in_hand': total(Payment.objects.filter(payment_type='sales', payment_method='check', status='in-hand'), 'amount'),
        'checks_deposited': total(Payment.objects.filter(payment_type='sales', status='deposited'), 'amount'),
        'pending_supplier_checks': total(Payment.objects.filter(payment_type='purchase', status='in-hand'), 'amount'),
        'bounced_checks': Payment.objects.filter(status='bounced').count(),
    }
