import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from backend.core.utils import create_audit_log, parse_date
from . import handlers, services
from .filters import InvoiceFilter, EstimateFilter, DeliveryNoteFilter, CreditNoteFilter, PrelevementFilter
from .models import Invoice, Estimate, DeliveryNote, CreditNote, Prelevement
from .serializers import (
    InvoiceSerializer, EstimateSerializer, DeliveryNoteSerializer, CreditNoteSerializer, PrelevementSerializer
)

logger = logging.getLogger('backend.sales')


def _invoices():
    return handlers.document_queryset(Invoice, 'client', 'bank_account', 'created_by')


# Invoices
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def invoice_list_create(request):
    """List invoices (status, client, date range) or create one"""
    if request.method == 'GET':
        return handlers.list_documents(request, _invoices(), InvoiceSerializer, InvoiceFilter)
    return handlers.create_document(request, InvoiceSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, pk):
    """
    Retrieve, update or delete an invoice.

    Sending amount_paid without status derives the status from it, and any
    increase is recorded as a treasury payment. Deleting reverses payments.
    """
    invoice = _invoices().filter(pk=pk).first()
    if invoice is None:
        return handlers.not_found('Invoice')

    if request.method == 'GET':
        return Response(InvoiceSerializer(invoice).data)
    elif request.method in ('PUT', 'PATCH'):
        return handlers.update_document(request, invoice, InvoiceSerializer)
    else:  # DELETE
        return handlers.delete_document(request, invoice, on_delete=services.delete_invoice)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_by_document_id(request, document_id):
    invoice = _invoices().filter(document_id=document_id).first()
    if invoice is None:
        return handlers.not_found('Invoice')
    return Response(InvoiceSerializer(invoice).data)


def _on_invoice_status_change(invoice, old_status):
    if invoice.status == 'paid':
        services.mark_invoice_paid(invoice)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def invoice_status_update(request, pk):
    invoice = _invoices().filter(pk=pk).first()
    if invoice is None:
        return handlers.not_found('Invoice')
    return handlers.update_document_status(request, invoice, InvoiceSerializer, on_change=_on_invoice_status_change)


# Estimates
def _estimates():
    return handlers.document_queryset(Estimate, 'client', 'converted_invoice', 'created_by')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def estimate_list_create(request):
    if request.method == 'GET':
        return handlers.list_documents(request, _estimates(), EstimateSerializer, EstimateFilter)
    return handlers.create_document(request, EstimateSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def estimate_detail(request, pk):
    estimate = _estimates().filter(pk=pk).first()
    if estimate is None:
        return handlers.not_found('Estimate')

    if request.method == 'GET':
        return Response(EstimateSerializer(estimate).data)
    elif request.method in ('PUT', 'PATCH'):
        return handlers.update_document(request, estimate, EstimateSerializer)
    else:  # DELETE
        return handlers.delete_document(request, estimate)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def estimate_status_update(request, pk):
    estimate = _estimates().filter(pk=pk).first()
    if estimate is None:
        return handlers.not_found('Estimate')
    return handlers.update_document_status(request, estimate, EstimateSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def estimate_convert(request, pk):
    """Turn an estimate into a draft invoice with the same lines"""
    estimate = _estimates().filter(pk=pk).first()
    if estimate is None:
        return handlers.not_found('Estimate')
    invoice_date = parse_date(request.data.get('date'))
    invoice = services.convert_estimate(estimate, user=request.user, invoice_date=invoice_date)
    create_audit_log(request=request, action='convert', model_name='Estimate', object_id=estimate.id,
                     object_name=str(estimate), object_reference=estimate.document_id,
                     changes={'invoice': invoice.document_id})
    return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


# Delivery notes (and divers)
def _delivery_notes():
    return handlers.document_queryset(DeliveryNote, 'client', 'supplier', 'warehouse', 'created_by')


@transaction.atomic
def _revert_and_delete_delivery_note(delivery_note):
    services.move_items_stock(
        delivery_note,
        list(delivery_note.items.select_related('product')),
        -services.delivery_direction(delivery_note),
    )
    delivery_note.delete()


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def delivery_note_list_create(request):
    """List delivery notes (document_type, client, supplier filters) or create one; creation moves stock"""
    if request.method == 'GET':
        return handlers.list_documents(request, _delivery_notes(), DeliveryNoteSerializer, DeliveryNoteFilter)
    return handlers.create_document(request, DeliveryNoteSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def delivery_note_detail(request, pk):
    delivery_note = _delivery_notes().filter(pk=pk).first()
    if delivery_note is None:
        return handlers.not_found('Delivery note')

    if request.method == 'GET':
        return Response(DeliveryNoteSerializer(delivery_note).data)
    elif request.method in ('PUT', 'PATCH'):
        return handlers.update_document(request, delivery_note, DeliveryNoteSerializer)
    else:  # DELETE
        return handlers.delete_document(request, delivery_note, on_delete=_revert_and_delete_delivery_note)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def delivery_note_status_update(request, pk):
    delivery_note = _delivery_notes().filter(pk=pk).first()
    if delivery_note is None:
        return handlers.not_found('Delivery note')
    return handlers.update_document_status(request, delivery_note, DeliveryNoteSerializer)


# Credit notes
def _credit_notes():
    return handlers.document_queryset(CreditNote, 'client', 'invoice', 'created_by')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def credit_note_list_create(request):
    if request.method == 'GET':
        return handlers.list_documents(request, _credit_notes(), CreditNoteSerializer, CreditNoteFilter)
    return handlers.create_document(request, CreditNoteSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def credit_note_detail(request, pk):
    credit_note = _credit_notes().filter(pk=pk).first()
    if credit_note is None:
        return handlers.not_found('Credit note')

    if request.method == 'GET':
        return Response(CreditNoteSerializer(credit_note).data)
    elif request.method in ('PUT', 'PATCH'):
        return handlers.update_document(request, credit_note, CreditNoteSerializer)
    else:  # DELETE
        return handlers.delete_document(request, credit_note)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def credit_note_status_update(request, pk):
    credit_note = _credit_notes().filter(pk=pk).first()
    if credit_note is None:
        return handlers.not_found('Credit note')
    return handlers.update_document_status(request, credit_note, CreditNoteSerializer)


# Prélèvements
def _prelevements():
    return handlers.document_queryset(Prelevement, 'client', 'warehouse', 'created_by')


@transaction.atomic
def _revert_and_delete_prelevement(prelevement):
    services.move_items_stock(prelevement, list(prelevement.items.select_related('product')), 1)
    prelevement.delete()


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def prelevement_list_create(request):
    if request.method == 'GET':
        return handlers.list_documents(request, _prelevements(), PrelevementSerializer, PrelevementFilter)
    return handlers.create_document(request, PrelevementSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def prelevement_detail(request, pk):
    prelevement = _prelevements().filter(pk=pk).first()
    if prelevement is None:
        return handlers.not_found('Prelevement')

    if request.method == 'GET':
        return Response(PrelevementSerializer(prelevement).data)
    elif request.method in ('PUT', 'PATCH'):
        return handlers.update_document(request, prelevement, PrelevementSerializer)
    else:  # DELETE
        return handlers.delete_document(request, prelevement, on_delete=_revert_and_delete_prelevement)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def prelevement_status_update(request, pk):
    prelevement = _prelevements().filter(pk=pk).first()
    if prelevement is None:
        return handlers.not_found('Prelevement')
    return handlers.update_document_status(request, prelevement, PrelevementSerializer)
