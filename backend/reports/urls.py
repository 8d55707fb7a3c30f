from django.urls import path
from .views import (
    dashboard_stats, dashboard_sales_chart, dashboard_revenue_chart, dashboard_top_products,
    dashboard_recent_activity, dashboard_stock_by_category, dashboard_stock_alerts,
    tax_report_list_create, tax_report_detail, tax_report_compute, tax_report_export,
    report_export, document_export
)

urlpatterns = [
    # Dashboard
    path('dashboard/stats/', dashboard_stats, name='dashboard-stats'),
    path('dashboard/sales-chart/', dashboard_sales_chart, name='dashboard-sales-chart'),
    path('dashboard/revenue-chart/', dashboard_revenue_chart, name='dashboard-revenue-chart'),
    path('dashboard/top-products/', dashboard_top_products, name='dashboard-top-products'),
    path('dashboard/recent-activity/', dashboard_recent_activity, name='dashboard-recent-activity'),
    path('dashboard/stock-by-category/', dashboard_stock_by_category, name='dashboard-stock-by-category'),
    path('dashboard/stock-alerts/', dashboard_stock_alerts, name='dashboard-stock-alerts'),

    # Tax reports
    path('tax-reports/', tax_report_list_create, name='tax-report-list-create'),
    path('tax-reports/compute/', tax_report_compute, name='tax-report-compute'),
    path('tax-reports/export/', tax_report_export, name='tax-report-export'),
    path('tax-reports/<int:pk>/', tax_report_detail, name='tax-report-detail'),

    # Exports
    path('reports/export/', report_export, name='report-export'),
    path('documents/<str:document_type>/<int:pk>/export/', document_export, name='document-export'),
]
