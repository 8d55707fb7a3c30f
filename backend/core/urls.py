from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, user_me, logout,
    user_list_create, user_detail, profile_update,
    company_settings, user_preferences,
    notification_list_create, notification_unread_count, notification_mark_read,
    notification_mark_all_read, notification_delete,
    audit_log_list,
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/logout/', logout, name='logout'),

    # Settings endpoints
    path('settings/company/', company_settings, name='company-settings'),
    path('settings/preferences/', user_preferences, name='user-preferences'),
    path('settings/profile/', profile_update, name='profile-update'),
    path('settings/users/', user_list_create, name='user-list-create'),
    path('settings/users/<int:pk>/', user_detail, name='user-detail'),

    # Notification endpoints
    path('notifications/', notification_list_create, name='notification-list-create'),
    path('notifications/unread/count/', notification_unread_count, name='notification-unread-count'),
    path('notifications/read-all/', notification_mark_all_read, name='notification-read-all'),
    path('notifications/<int:pk>/read/', notification_mark_read, name='notification-read'),
    path('notifications/<int:pk>/', notification_delete, name='notification-delete'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
]
