import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.http import HttpResponse
from django.utils import timezone

from backend.core.utils import create_audit_log
from backend.purchasing.models import PurchaseOrder, PurchaseInvoice
from backend.sales.models import Invoice, Estimate, DeliveryNote, CreditNote, Prelevement
from . import dashboard, excel, pdf, csv_export
from .models import TaxReport
from .serializers import TaxReportSerializer
from .tax import compute_tax_summary, normalize_quarter

logger = logging.getLogger('backend.reports')


def _int_param(request, name, default):
    try:
        return max(int(request.query_params.get(name, default)), 1)
    except (TypeError, ValueError):
        return default


# Dashboard
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    """KPIs for the current month and the previous one"""
    return Response(dashboard.dashboard_stats(timezone.localdate()))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_sales_chart(request):
    return Response(dashboard.sales_chart(timezone.localdate()))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_revenue_chart(request):
    return Response(dashboard.revenue_chart(timezone.localdate()))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_top_products(request):
    return Response(dashboard.top_products(_int_param(request, 'limit', 10)))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_recent_activity(request):
    return Response(dashboard.recent_activity(_int_param(request, 'limit', 20)))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stock_by_category(request):
    return Response(dashboard.stock_by_category())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stock_alerts(request):
    return Response(dashboard.stock_alerts())


# Tax reports
def _period_params(request):
    """(year, quarter) from the query string, or an error Response"""
    try:
        year = int(request.query_params.get('year', timezone.localdate().year))
        if year < 2000 or year > 2100:
            raise ValueError('Year out of range')
        quarter = normalize_quarter(request.query_params.get('quarter', 'annual'))
    except ValueError as e:
        return None, Response({'error': 'Validation Error', 'message': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return (year, quarter), None


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def tax_report_list_create(request):
    """
    List saved tax reports (optional ?year) or save one.

    POST upserts on (year, quarter); year, quarter and data are required.
    """
    if request.method == 'GET':
        reports = TaxReport.objects.all()
        year = request.query_params.get('year')
        if year:
            reports = reports.filter(year=year)
        return Response(TaxReportSerializer(reports.order_by('-year', '-quarter'), many=True).data)

    if not all(request.data.get(field) for field in ('year', 'quarter', 'data')):
        return Response(
            {'error': 'Validation Error', 'message': 'Year, quarter and data are required'},
            status=status.HTTP_400_BAD_REQUEST
        )
    serializer = TaxReportSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    report, created = TaxReport.objects.update_or_create(
        year=serializer.validated_data['year'],
        quarter=serializer.validated_data['quarter'],
        defaults={
            'data': serializer.validated_data['data'],
            'status': serializer.validated_data.get('status', 'draft'),
        },
    )
    create_audit_log(
        request=request,
        action='create' if created else 'update',
        model_name='TaxReport',
        object_id=report.id,
        object_name=str(report),
        changes={'status': report.status},
    )
    return Response(TaxReportSerializer(report).data, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tax_report_detail(request, pk):
    report = TaxReport.objects.filter(pk=pk).first()
    if report is None:
        return Response({'error': 'Not Found', 'message': 'Tax report not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(TaxReportSerializer(report).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tax_report_compute(request):
    """VAT, revenue and IS figures for ?year&quarter (q1..q4, 1..4 or annual)"""
    period, error = _period_params(request)
    if error is not None:
        return error
    return Response(compute_tax_summary(*period))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tax_report_export(request):
    """Tax summary as ?export=pdf (default), excel or csv"""
    period, error = _period_params(request)
    if error is not None:
        return error
    summary = compute_tax_summary(*period)
    export_format = request.query_params.get('export', 'pdf')
    if export_format == 'csv':
        return csv_export.tax_report_csv(summary)
    if export_format in ('excel', 'xlsx'):
        content, filename = excel.export_tax_report(summary)
        return _xlsx_response(content, filename)
    return pdf.pdf_response(pdf.render_tax_report_pdf(summary), f"rapport_fiscal_{period[0]}_{period[1]}.pdf")


# Exports
def _xlsx_response(content, filename):
    response = HttpResponse(content, content_type=excel.XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename={filename}'
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def report_export(request):
    """Styled Excel report (?type=inventory, sales-invoice, ...); ?export=csv for CSV"""
    report_type = request.query_params.get('type', 'inventory')
    config = excel.REPORT_CONFIGS.get(report_type)
    if config is None:
        return Response(
            {'error': 'Validation Error', 'message': f'Unknown report type "{report_type}"',
             'allowed': sorted(excel.REPORT_CONFIGS)},
            status=status.HTTP_400_BAD_REQUEST
        )
    if request.query_params.get('export') == 'csv':
        filename = f"{report_type}_Report_{timezone.localdate():%Y-%m-%d}.csv"
        return csv_export.report_csv(config['columns'], list(config['rows']()), filename)
    content, filename = excel.export_report(report_type)
    return _xlsx_response(content, filename)


EXPORTABLE_DOCUMENTS = {
    'invoice': Invoice,
    'estimate': Estimate,
    'delivery_note': DeliveryNote,
    'divers': DeliveryNote,
    'credit_note': CreditNote,
    'prelevement': Prelevement,
    'purchase_order': PurchaseOrder,
    'purchase_invoice': PurchaseInvoice,
}


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def document_export(request, document_type, pk):
    """One document as ?export=pdf (default) or csv"""
    model = EXPORTABLE_DOCUMENTS.get(document_type)
    if model is None:
        return Response({'error': 'Not Found', 'message': f'Unknown document type "{document_type}"'},
                        status=status.HTTP_404_NOT_FOUND)
    documents = model.objects.prefetch_related('items', 'items__product').filter(pk=pk)
    if model is DeliveryNote:
        documents = documents.filter(document_type=document_type)
    document = documents.first()
    if document is None:
        return Response({'error': 'Not Found', 'message': 'Document not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.query_params.get('export') == 'csv':
        return csv_export.document_csv(document)
    logger.info(f"PDF export of {document.document_id} by {request.user.email}")
    filename = f"{document.document_id.replace('/', '-')}.pdf"
    return pdf.pdf_response(pdf.render_document_pdf(document), filename)
