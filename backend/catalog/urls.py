from django.urls import path
from .views import product_list_create, product_low_stock, product_by_sku, product_detail, product_stock_update

urlpatterns = [
    path('products/', product_list_create, name='product-list-create'),
    path('products/low-stock/', product_low_stock, name='product-low-stock'),
    path('products/sku/<str:sku>/', product_by_sku, name='product-by-sku'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/stock/', product_stock_update, name='product-stock-update'),
]
