from rest_framework import serializers
from .models import StockItem, StockMovement


class StockItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)
    warehouse_code = serializers.CharField(source='warehouse.code', read_only=True)
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True)

    class Meta:
        model = StockItem
        fields = ['id', 'product', 'product_name', 'product_sku', 'warehouse', 'warehouse_code', 'warehouse_name',
                  'quantity', 'min_quantity', 'movement', 'last_updated']
        read_only_fields = ['product', 'warehouse', 'last_updated']


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)
    warehouse_code = serializers.CharField(source='warehouse.code', read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = ['id', 'product', 'product_name', 'product_sku', 'warehouse', 'warehouse_code', 'quantity',
                  'type', 'reference_id', 'description', 'created_at']
