from django.urls import path
from .views import stock_item_list, product_stock_items, product_stock_item_upsert, stock_movement_list

urlpatterns = [
    path('products/stock-items/', stock_item_list, name='stock-item-list'),
    path('products/movements/', stock_movement_list, name='stock-movement-list'),
    path('products/<int:pk>/stock-items/', product_stock_items, name='product-stock-items'),
    path('products/<int:pk>/stock-items/<slug:warehouse_code>/', product_stock_item_upsert, name='product-stock-item-upsert'),
]
