"""Dashboard figures. Results are cached and dropped when invoices or products change."""
import logging
from datetime import date
from decimal import Decimal

from django.db.models import Sum, Count, F, Q, DecimalField, ExpressionWrapper
from django.db.models.functions import TruncMonth

from backend.catalog.models import Product
from backend.core.cache_utils import cached_query, DASHBOARD_KPI_CACHE_TTL, DASHBOARD_CHART_CACHE_TTL
from backend.purchasing.models import PurchaseInvoice
from backend.sales.models import Invoice, InvoiceItem

logger = logging.getLogger('backend.reports')

CHART_COLORS = ['#3b82f6', '#10b981', '#f59e0b', '#ef4444', '#8b5cf6', '#ec4899']
MONTH_LABELS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def month_start(day, months_back=0):
    month_index = day.year * 12 + day.month - 1 - months_back
    return date(month_index // 12, month_index % 12 + 1, 1)


def month_end(day):
    following = month_start(day, -1)
    return date.fromordinal(following.toordinal() - 1)


def _paid_totals(start, end):
    revenue = Invoice.objects.filter(status='paid', date__range=(start, end)).aggregate(
        total=Sum('total'), count=Count('id'))
    expenses = PurchaseInvoice.objects.filter(status='paid', date__range=(start, end)).aggregate(
        total=Sum('total'))
    return (
        revenue['total'] or Decimal('0.00'),
        expenses['total'] or Decimal('0.00'),
        revenue['count'],
    )


@cached_query(cache_ttl=DASHBOARD_KPI_CACHE_TTL, key_prefix="dashboard_stats")
def dashboard_stats(today):
    """Current month KPIs with the previous month for comparison"""
    current_start = month_start(today)
    previous_start = month_start(today, 1)
    revenue, expenses, orders = _paid_totals(current_start, month_end(today))
    prev_revenue, prev_expenses, prev_orders = _paid_totals(previous_start, month_end(previous_start))

    stock_value = Product.objects.filter(is_deleted=False).aggregate(
        total=Sum(ExpressionWrapper(F('stock') * F('price'), output_field=DecimalField(max_digits=18, decimal_places=2)))
    )['total'] or Decimal('0.00')

    return {
        'kpis': {
            'total_sales': float(revenue),
            'total_earnings': float(revenue - expenses),
            'total_orders': orders,
            'total_stock_value': float(stock_value),
        },
        'comparisons': {
            'sales': {'current': float(revenue), 'previous': float(prev_revenue)},
            'earnings': {'current': float(revenue - expenses), 'previous': float(prev_revenue - prev_expenses)},
            'orders': {'current': orders, 'previous': prev_orders},
        },
    }


@cached_query(cache_ttl=DASHBOARD_CHART_CACHE_TTL, key_prefix="dashboard_sales_chart")
def sales_chart(today):
    """Paid invoice totals per day of the current month"""
    rows = (
        Invoice.objects.filter(status='paid', date__gte=month_start(today), date__lte=today)
        .values('date')
        .annotate(value=Sum('total'))
        .order_by('date')
    )
    return [{'label': f"{row['date']:%d}", 'value': float(row['value'])} for row in rows]


@cached_query(cache_ttl=DASHBOARD_CHART_CACHE_TTL, key_prefix="dashboard_revenue_chart")
def revenue_chart(today):
    """Revenue and expenses for the last 12 months, zero-filled"""
    first = month_start(today, 11)

    def by_month(queryset):
        rows = (
            queryset.filter(status='paid', date__gte=first)
            .annotate(month=TruncMonth('date'))
            .values('month')
            .annotate(total=Sum('total'))
        )
        return {(row['month'].year, row['month'].month): row['total'] for row in rows}

    revenue = by_month(Invoice.objects.all())
    expenses = by_month(PurchaseInvoice.objects.all())

    months = []
    for back in range(11, -1, -1):
        start = month_start(today, back)
        key = (start.year, start.month)
        months.append({
            'month': MONTH_LABELS[start.month - 1],
            'year': start.year,
            'revenue': float(revenue.get(key, 0)),
            'expenses': float(expenses.get(key, 0)),
        })
    return months


@cached_query(cache_ttl=DASHBOARD_CHART_CACHE_TTL, key_prefix="dashboard_top_products")
def top_products(limit=10):
    """Best sellers by quantity on paid invoices"""
    rows = (
        InvoiceItem.objects.filter(invoice__status='paid', product__isnull=False, product__is_deleted=False)
        .values('product_id', 'product__name', 'product__sku')
        .annotate(quantity=Sum('quantity'), revenue=Sum('total'))
        .order_by('-quantity', 'product__name')[:limit]
    )
    return [
        {
            'id': row['product_id'],
            'name': row['product__name'],
            'sku': row['product__sku'],
            'quantity': float(row['quantity']),
            'revenue': float(row['revenue']),
            'color': CHART_COLORS[index % 5],
        }
        for index, row in enumerate(rows)
    ]


def recent_activity(limit=20):
    """Latest sales and purchase invoices merged by creation time"""
    fields = ('document_id', 'total', 'date', 'status', 'created_at')
    invoices = [dict(row, type='invoice') for row in Invoice.objects.order_by('-created_at').values(*fields)[:limit]]
    purchases = [dict(row, type='purchase') for row in PurchaseInvoice.objects.order_by('-created_at').values(*fields)[:limit]]
    activity = sorted(invoices + purchases, key=lambda row: row['created_at'], reverse=True)[:limit]
    return [
        {
            'type': row['type'],
            'reference': row['document_id'],
            'amount': float(row['total']),
            'date': row['date'],
            'status': row['status'],
            'created_at': row['created_at'],
        }
        for row in activity
    ]


@cached_query(cache_ttl=DASHBOARD_CHART_CACHE_TTL, key_prefix="dashboard_stock_by_category")
def stock_by_category():
    rows = (
        Product.objects.filter(is_deleted=False).exclude(category='')
        .values('category')
        .annotate(stock=Sum('stock'))
        .order_by('-stock')
    )
    return [
        {'category': row['category'], 'stock': int(row['stock'] or 0), 'color': CHART_COLORS[index % len(CHART_COLORS)]}
        for index, row in enumerate(rows)
    ]


def stock_alerts(limit=10):
    """Products at or below their minimum stock, lowest first"""
    products = Product.objects.filter(is_deleted=False).filter(
        Q(stock__lte=F('min_stock')) | Q(stock__lte=0)
    ).order_by('stock', 'name')[:limit]
    return [
        {
            'id': product.id,
            'name': product.name,
            'sku': product.sku,
            'stock': int(product.stock),
            'min_stock': int(product.min_stock),
            'status': 'out_of_stock' if product.stock <= 0 else 'low_stock',
        }
        for product in products
    ]
