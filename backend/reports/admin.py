from django.contrib import admin
from .models import TaxReport


@admin.register(TaxReport)
class TaxReportAdmin(admin.ModelAdmin):
    list_display = ['year', 'quarter', 'status', 'updated_at']
    list_filter = ['year', 'status']
    ordering = ['-year', '-quarter']
    readonly_fields = ['created_at', 'updated_at']
