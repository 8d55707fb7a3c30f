import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log
from backend.locations.models import Warehouse
from .models import BankAccount, WarehouseCash, Payment
from .serializers import BankAccountSerializer, WarehouseCashSerializer, PaymentSerializer, PaymentStatusSerializer
from .services import (
    record_payment, update_payment, change_payment_status, delete_payment, delete_payments,
    link_invoice, treasury_summary
)

logger = logging.getLogger('backend.treasury')


# Bank accounts
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def bank_account_list_create(request):
    if request.method == 'GET':
        serializer = BankAccountSerializer(BankAccount.objects.all().order_by('name'), many=True)
        return Response(serializer.data)

    serializer = BankAccountSerializer(data=request.data)
    if serializer.is_valid():
        account = serializer.save()
        create_audit_log(request=request, action='create', model_name='BankAccount', object_id=account.id,
                         object_name=account.name, changes={'balance': str(account.balance)})
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def bank_account_detail(request, pk):
    account = get_object_or_404(BankAccount, pk=pk)

    if request.method == 'GET':
        return Response(BankAccountSerializer(account).data)
    elif request.method in ('PUT', 'PATCH'):
        old_balance = account.balance
        serializer = BankAccountSerializer(account, data=request.data, partial=True)
        if serializer.is_valid():
            account = serializer.save()
            create_audit_log(request=request, action='update', model_name='BankAccount', object_id=account.id,
                             object_name=account.name,
                             changes={'old_balance': str(old_balance), 'balance': str(account.balance)})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='BankAccount', object_id=account.id,
                         object_name=account.name)
        account.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Warehouse cash
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def warehouse_cash_list(request):
    queryset = WarehouseCash.objects.select_related('warehouse').order_by('warehouse__code')
    return Response(WarehouseCashSerializer(queryset, many=True).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def warehouse_cash_update(request, code):
    """Set the cash amount held at a warehouse"""
    warehouse = get_object_or_404(Warehouse, code=code)
    cash = WarehouseCash.objects.filter(warehouse=warehouse).first() or WarehouseCash(warehouse=warehouse)
    serializer = WarehouseCashSerializer(cash, data=request.data, partial=True)
    if serializer.is_valid():
        if 'amount' not in serializer.validated_data:
            return Response({'amount': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)
        serializer.save(warehouse=warehouse)
        logger.info(f"Warehouse cash for {warehouse.code} set to {serializer.instance.amount} by {request.user.email}")
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Payments
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def payment_list_create(request):
    """List payments (optionally by payment_type) or record a new one"""
    if request.method == 'GET':
        queryset = Payment.objects.select_related('bank_account', 'warehouse')
        payment_type = request.query_params.get('payment_type') or request.query_params.get('paymentType')
        if payment_type:
            queryset = queryset.filter(payment_type=payment_type)
        return Response(PaymentSerializer(queryset.order_by('-payment_date', '-created_at'), many=True).data)

    serializer = PaymentSerializer(data=request.data)
    if serializer.is_valid():
        data = dict(serializer.validated_data)
        data.update(link_invoice(data['payment_type'], data['invoice_number']))
        payment = record_payment(**data)
        create_audit_log(request=request, action='payment_add', model_name='Payment', object_id=payment.id,
                         object_name=payment.entity, object_reference=payment.invoice_number,
                         changes={'amount': str(payment.amount), 'status': payment.status})
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def payment_detail(request, pk):
    payment = get_object_or_404(Payment, pk=pk)

    if request.method == 'GET':
        return Response(PaymentSerializer(payment).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PaymentSerializer(payment, data=request.data, partial=True)
        if serializer.is_valid():
            payment = update_payment(payment, serializer.validated_data)
            create_audit_log(request=request, action='update', model_name='Payment', object_id=payment.id,
                             object_name=payment.entity, object_reference=payment.invoice_number,
                             changes={'fields': sorted(request.data.keys())})
            return Response(PaymentSerializer(payment).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='payment_revert', model_name='Payment', object_id=payment.id,
                         object_name=payment.entity, object_reference=payment.invoice_number,
                         changes={'amount': str(payment.amount), 'status': payment.status})
        delete_payment(payment)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def payment_status_update(request, pk):
    """Move a payment through in-hand / deposited / cleared / bounced"""
    payment = get_object_or_404(Payment, pk=pk)
    serializer = PaymentStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    old_status = payment.status
    payment = change_payment_status(payment, serializer.validated_data['status'])
    create_audit_log(request=request, action='status_change', model_name='Payment', object_id=payment.id,
                     object_name=payment.entity, object_reference=payment.invoice_number,
                     changes={'old_status': old_status, 'new_status': payment.status})
    return Response(PaymentSerializer(payment).data)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def payment_by_invoice(request, invoice_number):
    """First payment for an invoice number, or delete all of them"""
    queryset = Payment.objects.filter(invoice_number=invoice_number)
    payment_type = request.query_params.get('payment_type') or request.query_params.get('paymentType')
    if payment_type:
        queryset = queryset.filter(payment_type=payment_type)

    if request.method == 'GET':
        payment = queryset.order_by('created_at').first()
        if payment is None:
            return Response({'error': 'Not Found', 'message': 'No payment for this invoice'}, status=status.HTTP_404_NOT_FOUND)
        return Response(PaymentSerializer(payment).data)

    deleted = delete_payments(queryset)
    logger.info(f"Deleted {deleted} payment(s) for {invoice_number}")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def summary(request):
    return Response(treasury_summary())
