from django.urls import path
from . import views

urlpatterns = [
    path('invoices/', views.invoice_list_create, name='invoice-list-create'),
    path('invoices/document/<path:document_id>/', views.invoice_by_document_id, name='invoice-by-document-id'),
    path('invoices/<int:pk>/', views.invoice_detail, name='invoice-detail'),
    path('invoices/<int:pk>/status/', views.invoice_status_update, name='invoice-status-update'),
    path('estimates/', views.estimate_list_create, name='estimate-list-create'),
    path('estimates/<int:pk>/', views.estimate_detail, name='estimate-detail'),
    path('estimates/<int:pk>/status/', views.estimate_status_update, name='estimate-status-update'),
    path('estimates/<int:pk>/convert/', views.estimate_convert, name='estimate-convert'),
    path('delivery-notes/', views.delivery_note_list_create, name='delivery-note-list-create'),
    path('delivery-notes/<int:pk>/', views.delivery_note_detail, name='delivery-note-detail'),
    path('delivery-notes/<int:pk>/status/', views.delivery_note_status_update, name='delivery-note-status-update'),
    path('credit-notes/', views.credit_note_list_create, name='credit-note-list-create'),
    path('credit-notes/<int:pk>/', views.credit_note_detail, name='credit-note-detail'),
    path('credit-notes/<int:pk>/status/', views.credit_note_status_update, name='credit-note-status-update'),
    path('prelevements/', views.prelevement_list_create, name='prelevement-list-create'),
    path('prelevements/<int:pk>/', views.prelevement_detail, name='prelevement-detail'),
    path('prelevements/<int:pk>/status/', views.prelevement_status_update, name='prelevement-status-update'),
]
