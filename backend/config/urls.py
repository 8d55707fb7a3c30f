"""
URL configuration for the EvoTech backend.

Every app mounts its routes under /api/v1/; the health check stays
outside the versioned prefix so load balancers can probe it.
"""
from django.contrib import admin
from django.urls import path, include
from backend.core.views import health

admin.site.site_header = "EvoTech Administration"
admin.site.site_title = "EvoTech Admin Portal"
admin.site.index_title = "EvoTech Gestion Commerciale"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/health/', health, name='health'),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.locations.urls')),
    path('api/v1/', include('backend.catalog.urls')),
    path('api/v1/', include('backend.inventory.urls')),
    path('api/v1/', include('backend.parties.urls')),
    path('api/v1/', include('backend.sales.urls')),
    path('api/v1/', include('backend.purchasing.urls')),
    path('api/v1/', include('backend.treasury.urls')),
    path('api/v1/', include('backend.reports.urls')),
]
