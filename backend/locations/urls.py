from django.urls import path
from .views import warehouse_list_create, warehouse_detail

urlpatterns = [
    path('settings/warehouses/', warehouse_list_create, name='warehouse-list-create'),
    path('settings/warehouses/<slug:code>/', warehouse_detail, name='warehouse-detail'),
]
