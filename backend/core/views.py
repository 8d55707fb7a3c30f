import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone

from .models import CompanySettings, UserPreference, Notification, AuditLog
from .permissions import IsAdminRole, IsAdminOrManager
from .serializers import (
    UserSerializer, UserCreateSerializer, ProfileSerializer,
    CompanySettingsSerializer, UserPreferenceSerializer,
    NotificationSerializer, AuditLogSerializer
)
from .utils import create_audit_log

User = get_user_model()
logger = logging.getLogger(__name__)


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    default_error_messages = {
        'no_active_account': 'Invalid email or password',
    }

    def validate(self, attrs):
        attrs[self.username_field] = str(attrs.get(self.username_field, '')).lower().strip()
        data = super().validate(attrs)
        if self.user.status != 'active':
            raise AuthenticationFailed('Account is inactive. Please contact an administrator.')
        data['user'] = UserSerializer(self.user).data
        logger.info(f"User logged in: {self.user.email}")
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['name'] = user.name
        token['role'] = user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Custom token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role-based access flags"""
    user = request.user
    if user.status != 'active':
        return Response({'error': 'Unauthorized', 'message': 'Account is inactive'}, status=status.HTTP_401_UNAUTHORIZED)
    user_data = UserSerializer(user).data
    is_admin = user.is_superuser or user.role == 'admin'
    is_manager = is_admin or user.role == 'manager'
    user_data['is_admin'] = is_admin
    user_data['can_manage_users'] = is_admin
    user_data['can_access_reports'] = is_manager or user.role == 'accountant'
    user_data['can_access_treasury'] = is_manager or user.role == 'accountant'
    user_data['can_edit_documents'] = user.role != 'viewer' or is_admin
    return Response(user_data)


@api_view(['POST'])
@permission_classes([AllowAny])
def logout(request):
    """Tokens are stateless; the client discards them"""
    return Response({'message': 'Logged out successfully'})


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    return Response({
        'status': 'ok',
        'message': 'EvoTech Backend API is running',
        'timestamp': timezone.now().isoformat(),
        'version': settings.APP_VERSION,
    })


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrManager])
def user_list_create(request):
    """List all users or create a new user (admin only)"""
    if request.method == 'GET':
        users = User.objects.all().order_by('name')
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        if not IsAdminRole().has_permission(request, None):
            return Response({'error': 'Forbidden', 'message': 'Administrator role required.'}, status=status.HTTP_403_FORBIDDEN)
        serializer = UserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            create_audit_log(request=request, action='create', model_name='User', object_id=user.id, object_name=user.email)
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk):
    """Retrieve (any authenticated user), update or delete (admin only) a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)

    if not IsAdminRole().has_permission(request, None):
        return Response({'error': 'Forbidden', 'message': 'Administrator role required.'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        data = request.data.copy()
        password = data.pop('password', None)
        serializer = UserSerializer(user, data=data, partial=True)
        if serializer.is_valid():
            user = serializer.save()
            if password:
                if isinstance(password, list):
                    password = password[0]
                user.set_password(password)
                user.save(update_fields=['password'])
            create_audit_log(request=request, action='update', model_name='User', object_id=user.id,
                             object_name=user.email, changes={k: v for k, v in data.items()})
            return Response(UserSerializer(user).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'Error', 'message': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='delete', model_name='User', object_id=user.id, object_name=user.email)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def profile_update(request):
    """Update the current user's name, email or password"""
    if not request.data:
        return Response({'error': 'No updates provided'}, status=status.HTTP_400_BAD_REQUEST)
    serializer = ProfileSerializer(request.user, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(UserSerializer(request.user).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Company settings
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def company_settings(request):
    """
    GET returns the company settings (or null before first setup).
    PUT creates them on first call, otherwise updates only the fields sent.
    """
    company = CompanySettings.get_solo()

    if request.method == 'GET':
        if company is None:
            return Response(None)
        return Response(CompanySettingsSerializer(company).data)

    if not IsAdminOrManager().has_permission(request, None):
        return Response({'error': 'Forbidden', 'message': 'Administrator or manager role required.'}, status=status.HTTP_403_FORBIDDEN)

    if company is None:
        serializer = CompanySettingsSerializer(data=request.data)
        if serializer.is_valid():
            company = serializer.save()
            create_audit_log(request=request, action='create', model_name='CompanySettings', object_id=company.id, object_name=company.name)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    serializer = CompanySettingsSerializer(company, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        create_audit_log(request=request, action='update', model_name='CompanySettings', object_id=company.id,
                         object_name=company.name, changes={'fields': sorted(request.data.keys())})
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def user_preferences(request):
    """Current user's preferences; PUT upserts them"""
    preferences = UserPreference.objects.filter(user=request.user).first()

    if request.method == 'GET':
        if preferences is None:
            # Defaults without persisting
            preferences = UserPreference(user=request.user)
        return Response(UserPreferenceSerializer(preferences).data)

    created = preferences is None
    if created:
        preferences = UserPreference(user=request.user)
    serializer = UserPreferenceSerializer(preferences, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save(user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Notification views
def _visible_notifications(user):
    return Notification.objects.filter(Q(user=user) | Q(user__isnull=True))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def notification_list_create(request):
    """List the user's and broadcast notifications, or create one"""
    if request.method == 'GET':
        queryset = _visible_notifications(request.user)
        unread_only = request.query_params.get('unread', '').lower() in ('1', 'true')
        if unread_only:
            queryset = queryset.filter(read=False)
        try:
            limit = int(request.query_params.get('limit', 50))
        except ValueError:
            limit = 50
        serializer = NotificationSerializer(queryset.order_by('-created_at')[:limit], many=True)
        return Response(serializer.data)
    else:
        serializer = NotificationSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_unread_count(request):
    count = _visible_notifications(request.user).filter(read=False).count()
    return Response({'count': count})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, pk):
    notification = get_object_or_404(_visible_notifications(request.user), pk=pk)
    if not notification.read:
        notification.read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=['read', 'read_at'])
    return Response(NotificationSerializer(notification).data)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def notification_mark_all_read(request):
    updated = _visible_notifications(request.user).filter(read=False).update(read=True, read_at=timezone.now())
    return Response({'message': 'All notifications marked as read', 'updated': updated})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def notification_delete(request, pk):
    notification = get_object_or_404(_visible_notifications(request.user), pk=pk)
    notification.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering (non-admins only see their own)"""
    queryset = AuditLog.objects.select_related('user')

    if not (request.user.is_superuser or request.user.role == 'admin'):
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    reference = request.query_params.get('reference', None)
    if reference:
        queryset = queryset.filter(object_reference=reference)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')[:500]
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)
