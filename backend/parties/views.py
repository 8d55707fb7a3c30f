import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log, parse_date
from .filters import ContactFilter
from .models import Contact
from .serializers import ContactSerializer
from .statements import build_statement

logger = logging.getLogger('backend.parties')


def _contact_list(request, contact_type=None):
    queryset = Contact.objects.all()
    if contact_type:
        queryset = queryset.filter(contact_type=contact_type)
    contact_filter = ContactFilter(request.query_params, queryset=queryset)
    if not contact_filter.is_valid():
        return Response(contact_filter.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer = ContactSerializer(contact_filter.qs.order_by('name'), many=True)
    return Response(serializer.data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def contact_list_create(request):
    """List contacts (contact_type, status, search filters) or create one"""
    if request.method == 'GET':
        return _contact_list(request)
    serializer = ContactSerializer(data=request.data)
    if serializer.is_valid():
        contact = serializer.save()
        create_audit_log(request=request, action='create', model_name='Contact', object_id=contact.id,
                         object_name=contact.display_name)
        return Response(ContactSerializer(contact).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def client_list(request):
    return _contact_list(request, 'client')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_list(request):
    return _contact_list(request, 'supplier')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def contact_detail(request, pk):
    """Retrieve, update or delete a contact"""
    contact = get_object_or_404(Contact, pk=pk)

    if request.method == 'GET':
        serializer = ContactSerializer(contact)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ContactSerializer(contact, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Contact', object_id=contact.id,
                             object_name=contact.display_name, changes={'fields': sorted(request.data.keys())})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if _has_documents(contact):
            return Response(
                {'error': 'Error', 'message': 'Contact has documents and cannot be deleted. Set it inactive instead.'},
                status=status.HTTP_409_CONFLICT
            )
        create_audit_log(request=request, action='delete', model_name='Contact', object_id=contact.id,
                         object_name=contact.display_name)
        contact.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


def _has_documents(contact):
    return (
        contact.invoices.exists() or contact.estimates.exists() or contact.credit_notes.exists()
        or contact.purchase_orders.exists() or contact.purchase_invoices.exists()
        or contact.delivery_notes.exists() or contact.supplier_delivery_notes.exists()
        or contact.prelevements.exists()
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def contact_statement(request, pk):
    """Account statement (Relevé) with running balance"""
    contact = get_object_or_404(Contact, pk=pk)
    date_from = parse_date(request.query_params.get('date_from'))
    date_to = parse_date(request.query_params.get('date_to'))
    if date_from and date_to and date_from > date_to:
        return Response({'error': 'Error', 'message': 'date_from must be before date_to'}, status=status.HTTP_400_BAD_REQUEST)

    statement = build_statement(contact, date_from=date_from, date_to=date_to)
    export_format = request.query_params.get('export')
    if export_format == 'pdf':
        from backend.reports.pdf import render_statement_pdf, pdf_response
        return pdf_response(render_statement_pdf(statement), f"releve_{contact.pk}.pdf")
    return Response(statement)
