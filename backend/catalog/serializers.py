from rest_framework import serializers
from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    stock_value = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'sku', 'name', 'description', 'category', 'unit', 'price', 'stock', 'min_stock',
            'image', 'status', 'last_movement', 'stock_value', 'created_at', 'updated_at'
        ]
        read_only_fields = ['status', 'last_movement', 'created_at', 'updated_at']

    def get_stock_value(self, obj):
        return obj.stock * obj.price

    def validate_sku(self, value):
        value = value.strip()
        queryset = Product.objects.filter(sku__iexact=value)
        if self.instance:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('A product with this SKU already exists')
        return value

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError('Price cannot be negative')
        return value

    def validate_min_stock(self, value):
        if value < 0:
            raise serializers.ValidationError('Minimum stock cannot be negative')
        return value
