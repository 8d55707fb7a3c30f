import logging
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.sales import handlers
from . import services
from .filters import PurchaseOrderFilter, PurchaseInvoiceFilter
from .models import PurchaseOrder, PurchaseInvoice
from .serializers import PurchaseOrderSerializer, PurchaseInvoiceSerializer

logger = logging.getLogger('backend.purchasing')


# Purchase orders
def _purchase_orders():
    return handlers.document_queryset(PurchaseOrder, 'supplier', 'warehouse', 'created_by')


def _on_order_status_change(order, old_status):
    if order.status == 'received':
        services.receive_purchase_order(order)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def purchase_order_list_create(request):
    """List purchase orders (status, supplier, date range) or create one"""
    if request.method == 'GET':
        return handlers.list_documents(request, _purchase_orders(), PurchaseOrderSerializer, PurchaseOrderFilter)
    return handlers.create_document(request, PurchaseOrderSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def purchase_order_detail(request, pk):
    """
    Retrieve, update or delete a purchase order.

    Moving the order to ``received`` adds its product lines to stock, once.
    Deleting an order never touches stock.
    """
    order = _purchase_orders().filter(pk=pk).first()
    if order is None:
        return handlers.not_found('Purchase order')

    if request.method == 'GET':
        return Response(PurchaseOrderSerializer(order).data)
    elif request.method in ('PUT', 'PATCH'):
        return handlers.update_document(request, order, PurchaseOrderSerializer)
    else:  # DELETE
        return handlers.delete_document(request, order)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def purchase_order_status_update(request, pk):
    order = _purchase_orders().filter(pk=pk).first()
    if order is None:
        return handlers.not_found('Purchase order')
    return handlers.update_document_status(request, order, PurchaseOrderSerializer, on_change=_on_order_status_change)


# Purchase invoices
def _purchase_invoices():
    return handlers.document_queryset(PurchaseInvoice, 'supplier', 'bank_account', 'delivery_note', 'created_by')


def _on_purchase_invoice_status_change(invoice, old_status):
    if invoice.status == 'paid':
        services.mark_purchase_invoice_paid(invoice)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def purchase_invoice_list_create(request):
    """
    List supplier invoices or create one.

    A delivery note already backing a non-cancelled invoice is rejected
    with errorCode DUPLICATE_INVOICE_FROM_BL.
    """
    if request.method == 'GET':
        return handlers.list_documents(request, _purchase_invoices(), PurchaseInvoiceSerializer, PurchaseInvoiceFilter)
    return handlers.create_document(request, PurchaseInvoiceSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def purchase_invoice_detail(request, pk):
    invoice = _purchase_invoices().filter(pk=pk).first()
    if invoice is None:
        return handlers.not_found('Purchase invoice')

    if request.method == 'GET':
        return Response(PurchaseInvoiceSerializer(invoice).data)
    elif request.method in ('PUT', 'PATCH'):
        return handlers.update_document(request, invoice, PurchaseInvoiceSerializer)
    else:  # DELETE
        return handlers.delete_document(request, invoice, on_delete=services.delete_purchase_invoice)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def purchase_invoice_status_update(request, pk):
    invoice = _purchase_invoices().filter(pk=pk).first()
    if invoice is None:
        return handlers.not_found('Purchase invoice')
    return handlers.update_document_status(
        request, invoice, PurchaseInvoiceSerializer, on_change=_on_purchase_invoice_status_change)
