from django.urls import path
from . import views

urlpatterns = [
    path('treasury/bank-accounts/', views.bank_account_list_create, name='bank-account-list-create'),
    path('treasury/bank-accounts/<int:pk>/', views.bank_account_detail, name='bank-account-detail'),
    path('treasury/warehouse-cash/', views.warehouse_cash_list, name='warehouse-cash-list'),
    path('treasury/warehouse-cash/<slug:code>/', views.warehouse_cash_update, name='warehouse-cash-update'),
    path('treasury/payments/', views.payment_list_create, name='payment-list-create'),
    path('treasury/payments/invoice/<path:invoice_number>/', views.payment_by_invoice, name='payment-by-invoice'),
    path('treasury/payments/<int:pk>/', views.payment_detail, name='payment-detail'),
    path('treasury/payments/<int:pk>/status/', views.payment_status_update, name='payment-status-update'),
    path('treasury/summary/', views.summary, name='treasury-summary'),
]
