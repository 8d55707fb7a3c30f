from django.urls import path
from .views import (
    purchase_order_list_create, purchase_order_detail, purchase_order_status_update,
    purchase_invoice_list_create, purchase_invoice_detail, purchase_invoice_status_update
)

urlpatterns = [
    path('purchase-orders/', purchase_order_list_create, name='purchase-order-list-create'),
    path('purchase-orders/<int:pk>/', purchase_order_detail, name='purchase-order-detail'),
    path('purchase-orders/<int:pk>/status/', purchase_order_status_update, name='purchase-order-status'),

    path('purchase-invoices/', purchase_invoice_list_create, name='purchase-invoice-list-create'),
    path('purchase-invoices/<int:pk>/', purchase_invoice_detail, name='purchase-invoice-detail'),
    path('purchase-invoices/<int:pk>/status/', purchase_invoice_status_update, name='purchase-invoice-status'),
]
