"""
Request handling shared by the sales and purchasing document endpoints.

Each resource keeps its own @api_view functions; they delegate the common
list / create / update / delete / status flow to these helpers.
"""
import logging

from django.db import transaction
from rest_framework import status
from rest_framework.response import Response

from backend.core.status_mapper import resolve_status
from backend.core.utils import create_audit_log, paginate

logger = logging.getLogger('backend.sales')


def not_found(label):
    return Response({'error': 'Not Found', 'message': f'{label} not found'}, status=status.HTTP_404_NOT_FOUND)


def document_queryset(model, *related):
    return model.objects.select_related(*related).prefetch_related('items', 'items__product')


def list_documents(request, queryset, serializer_class, filterset_class):
    """Filtered list, newest first; paginated when ?page is given"""
    document_filter = filterset_class(request.query_params, queryset=queryset)
    if not document_filter.is_valid():
        return Response(document_filter.errors, status=status.HTTP_400_BAD_REQUEST)
    queryset = document_filter.qs.order_by('-date', '-created_at')
    if request.query_params.get('page'):
        return Response(paginate(queryset, request, serializer_class))
    serializer = serializer_class(queryset, many=True)
    return Response(serializer.data)


def _split_items(request, default):
    data = request.data.copy()
    items_data = data.pop('items', default)
    return data, items_data


def _audit(request, action, document, changes=None):
    create_audit_log(
        request=request,
        action=action,
        model_name=document.__class__.__name__,
        object_id=document.id,
        object_name=str(document),
        object_reference=document.document_id,
        changes=changes or {},
    )


def create_document(request, serializer_class):
    data, items_data = _split_items(request, [])
    serializer = serializer_class(data=data, context={'items_data': items_data, 'request': request})
    if serializer.is_valid():
        document = serializer.save(created_by=request.user)
        logger.info(f"{document.__class__.__name__} {document.document_id} created by {request.user.email}")
        _audit(request, 'create', document, {'total': str(document.total), 'status': document.status})
        return Response(serializer_class(document).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


def update_document(request, document, serializer_class):
    """PUT and PATCH both only touch the fields sent; ``items`` replaces all lines"""
    data, items_data = _split_items(request, None)
    old_values = {'status': document.status, 'total': str(document.total)}
    serializer = serializer_class(
        document,
        data=data,
        partial=True,
        context={'items_data': items_data, 'request': request}
    )
    if serializer.is_valid():
        document = serializer.save()
        # items were replaced; drop the list prefetched with the document
        document._prefetched_objects_cache = {}
        _audit(request, 'update', document, {'before': old_values, 'fields': sorted(request.data.keys())})
        return Response(serializer_class(document).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


def delete_document(request, document, on_delete=None):
    _audit(request, 'delete', document, {'total': str(document.total)})
    if on_delete is not None:
        on_delete(document)
    else:
        document.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


def update_document_status(request, document, serializer_class, on_change=None):
    """
    Set a document's status from a stored or UI status name.

    ``on_change(document, old_status)`` runs after the new status is saved.
    """
    raw_status = request.data.get('status')
    if not raw_status:
        return Response({'error': 'Validation Error', 'message': 'status is required'}, status=status.HTTP_400_BAD_REQUEST)
    choices = {choice for choice, _ in document.STATUS_CHOICES}
    new_status = resolve_status(document.DOCUMENT_TYPE, raw_status, choices)
    if new_status is None:
        return Response(
            {'error': 'Validation Error', 'message': f'Invalid status "{raw_status}"', 'allowed': sorted(choices)},
            status=status.HTTP_400_BAD_REQUEST
        )

    old_status = document.status
    with transaction.atomic():
        document.status = new_status
        document.save(update_fields=['status', 'updated_at'])
        if on_change is not None and old_status != new_status:
            on_change(document, old_status)
    _audit(request, 'status_change', document, {'old_status': old_status, 'new_status': new_status})
    logger.info(f"{document.__class__.__name__} {document.document_id}: {old_status} -> {new_status}")
    document.refresh_from_db()
    return Response(serializer_class(document).data)
