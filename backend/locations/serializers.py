from rest_framework import serializers
from .models import Warehouse


class WarehouseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Warehouse
        fields = ['id', 'code', 'name', 'city', 'address', 'phone', 'email', 'created_at', 'updated_at']
        read_only_fields = ['code', 'created_at', 'updated_at']
