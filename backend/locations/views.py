import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.permissions import IsAdminOrManager
from backend.core.utils import create_audit_log
from .models import Warehouse, slugify_warehouse_name
from .serializers import WarehouseSerializer

logger = logging.getLogger('backend.locations')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def warehouse_list_create(request):
    """List all warehouses or create a new warehouse"""
    if request.method == 'GET':
        warehouses = Warehouse.objects.all().order_by('name')
        serializer = WarehouseSerializer(warehouses, many=True)
        return Response(serializer.data)

    if not IsAdminOrManager().has_permission(request, None):
        logger.warning(f"User {request.user.email} attempted to create a warehouse without privileges")
        return Response({'error': 'Only administrators or managers can create warehouses'}, status=status.HTTP_403_FORBIDDEN)

    serializer = WarehouseSerializer(data=request.data)
    if serializer.is_valid():
        code = slugify_warehouse_name(serializer.validated_data['name'])
        if not code:
            return Response({'name': ['Name must contain letters or digits']}, status=status.HTTP_400_BAD_REQUEST)
        if Warehouse.objects.filter(code=code).exists():
            return Response({'error': 'Error', 'message': 'A record with this value already exists'}, status=status.HTTP_409_CONFLICT)
        warehouse = serializer.save(code=code)
        logger.info(f"Warehouse '{warehouse.name}' ({warehouse.code}) created by {request.user.email}")
        create_audit_log(request=request, action='create', model_name='Warehouse', object_id=warehouse.id,
                         object_name=warehouse.name, object_reference=warehouse.code)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def warehouse_detail(request, code):
    """Retrieve, update or delete a warehouse by code"""
    warehouse = get_object_or_404(Warehouse, code=code)

    if request.method == 'GET':
        serializer = WarehouseSerializer(warehouse)
        return Response(serializer.data)

    if not IsAdminOrManager().has_permission(request, None):
        return Response({'error': 'Only administrators or managers can modify warehouses'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        # code stays stable on rename so stock and preferences keep pointing here
        serializer = WarehouseSerializer(warehouse, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        logger.info(f"User {request.user.email} deleting warehouse {warehouse.code}")
        create_audit_log(request=request, action='delete', model_name='Warehouse', object_id=warehouse.id,
                         object_name=warehouse.name, object_reference=warehouse.code)
        warehouse.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
