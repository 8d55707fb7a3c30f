from django.contrib import admin
from .models import Contact


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'contact_type', 'status', 'city', 'phone', 'total_transactions']
    list_filter = ['contact_type', 'status', 'city']
    search_fields = ['name', 'company', 'email', 'ice']
    ordering = ['name']
