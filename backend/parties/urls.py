from django.urls import path
from .views import contact_list_create, client_list, supplier_list, contact_detail, contact_statement

urlpatterns = [
    path('contacts/', contact_list_create, name='contact-list-create'),
    path('contacts/clients/', client_list, name='contact-clients'),
    path('contacts/suppliers/', supplier_list, name='contact-suppliers'),
    path('contacts/<int:pk>/', contact_detail, name='contact-detail'),
    path('contacts/<int:pk>/statement/', contact_statement, name='contact-statement'),
]
