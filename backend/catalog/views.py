import logging
from decimal import Decimal, InvalidOperation

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import F
from django.shortcuts import get_object_or_404
from django.utils import timezone

from backend.core.utils import create_audit_log, paginate
from backend.inventory.services import notify_low_stock, set_product_stock
from .filters import ProductFilter
from .models import Product
from .serializers import ProductSerializer

logger = logging.getLogger('backend.catalog')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List products (search, category, status) or create a product"""
    if request.method == 'GET':
        product_filter = ProductFilter(request.query_params, queryset=Product.active.all())
        if not product_filter.is_valid():
            return Response(product_filter.errors, status=status.HTTP_400_BAD_REQUEST)
        queryset = product_filter.qs.order_by('name')
        if request.query_params.get('page'):
            return Response(paginate(queryset, request, ProductSerializer))
        serializer = ProductSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = ProductSerializer(data=request.data)
    if serializer.is_valid():
        product = serializer.save(last_movement=timezone.localdate())
        logger.info(f"Product {product.sku} created by {request.user.email}")
        create_audit_log(request=request, action='create', model_name='Product', object_id=product.id,
                         object_name=product.name, object_reference=product.sku,
                         changes={'stock': str(product.stock), 'price': str(product.price)})
        if product.status == 'low_stock':
            notify_low_stock(
                product,
                f'New Product "{product.name}" ({product.sku}) created with low stock. Current: {product.stock}, Min: {product.min_stock}'
            )
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_low_stock(request):
    products = Product.active.filter(min_stock__gt=0, stock__lte=F('min_stock')).order_by('stock')
    serializer = ProductSerializer(products, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_by_sku(request, sku):
    product = Product.active.filter(sku=sku).first()
    if product is None:
        return Response({'error': 'Not Found', 'message': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(ProductSerializer(product).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or soft-delete a product"""
    product = Product.active.filter(pk=pk).first()
    if product is None:
        return Response({'error': 'Not Found', 'message': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(ProductSerializer(product).data)
    elif request.method in ('PUT', 'PATCH'):
        old_values = {'price': str(product.price), 'stock': str(product.stock), 'min_stock': str(product.min_stock)}
        serializer = ProductSerializer(product, data=request.data, partial=True)
        if serializer.is_valid():
            product = serializer.save()
            create_audit_log(request=request, action='update', model_name='Product', object_id=product.id,
                             object_name=product.name, object_reference=product.sku,
                             changes={'before': old_values, 'fields': sorted(request.data.keys())})
            if product.status == 'low_stock':
                notify_low_stock(product)
            return Response(ProductSerializer(product).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        product.is_deleted = True
        product.save(update_fields=['is_deleted', 'updated_at'])
        create_audit_log(request=request, action='delete', model_name='Product', object_id=product.id,
                         object_name=product.name, object_reference=product.sku)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def product_stock_update(request, pk):
    """Set a product's total stock; the difference is logged as a movement"""
    product = get_object_or_404(Product.active, pk=pk)
    quantity = request.data.get('quantity')
    if quantity is None:
        return Response({'error': 'Validation Error', 'message': 'Quantity is required'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        quantity = Decimal(str(quantity))
    except InvalidOperation:
        quantity = None
    if quantity is None or not quantity.is_finite():
        return Response({'error': 'Validation Error', 'message': 'Quantity must be a number'}, status=status.HTTP_400_BAD_REQUEST)

    old_stock = product.stock
    with transaction.atomic():
        product = set_product_stock(product, quantity, user=request.user)
    create_audit_log(request=request, action='stock_adjust', model_name='Product', object_id=product.id,
                     object_name=product.name, object_reference=product.sku,
                     changes={'old_stock': str(old_stock), 'new_stock': str(product.stock)})
    return Response(ProductSerializer(product).data)
