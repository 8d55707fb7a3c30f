import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.catalog.models import Product
from backend.core.utils import create_audit_log
from backend.locations.models import Warehouse
from .models import StockItem, StockMovement
from .serializers import StockItemSerializer, StockMovementSerializer

logger = logging.getLogger('backend.inventory')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_item_list(request):
    """All warehouse stock items, optionally for one warehouse"""
    queryset = StockItem.objects.select_related('product', 'warehouse').order_by('product_id')
    warehouse_code = request.query_params.get('warehouse')
    if warehouse_code:
        queryset = queryset.filter(warehouse__code=warehouse_code)
    serializer = StockItemSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_stock_items(request, pk):
    product = get_object_or_404(Product.active, pk=pk)
    queryset = product.stock_items.select_related('product', 'warehouse')
    serializer = StockItemSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def product_stock_item_upsert(request, pk, warehouse_code):
    """Set the quantity held for a product in one warehouse (creates the row if needed)"""
    product = get_object_or_404(Product.active, pk=pk)
    warehouse = get_object_or_404(Warehouse, code=warehouse_code)

    stock_item = StockItem.objects.filter(product=product, warehouse=warehouse).first()
    created = stock_item is None
    if created:
        stock_item = StockItem(product=product, warehouse=warehouse)

    serializer = StockItemSerializer(stock_item, data=request.data, partial=True)
    if serializer.is_valid():
        if 'quantity' not in serializer.validated_data and created:
            return Response({'quantity': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)
        serializer.save(product=product, warehouse=warehouse)
        create_audit_log(
            request=request,
            action='stock_adjust',
            model_name='StockItem',
            object_id=stock_item.id,
            object_name=product.name,
            object_reference=product.sku,
            changes={'warehouse': warehouse.code, 'quantity': str(stock_item.quantity), 'movement': stock_item.movement}
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_movement_list(request):
    """Latest stock movements (limit, product, reference filters)"""
    queryset = StockMovement.objects.select_related('product', 'warehouse')
    product_id = request.query_params.get('product')
    if product_id:
        queryset = queryset.filter(product_id=product_id)
    reference = request.query_params.get('reference')
    if reference:
        queryset = queryset.filter(reference_id=reference)
    try:
        limit = int(request.query_params.get('limit', 50))
    except ValueError:
        limit = 50
    serializer = StockMovementSerializer(queryset.order_by('-created_at', '-id')[:limit], many=True)
    return Response(serializer.data)
