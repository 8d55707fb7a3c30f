import re

from django.db import models


def slugify_warehouse_name(name):
    """'Dépôt Casa 2' -> 'dpt-casa-2' (lowercase, spaces to dashes, other characters dropped)"""
    slug = re.sub(r'\s+', '-', (name or '').strip().lower())
    return re.sub(r'[^a-z0-9-]', '', slug)


class Warehouse(models.Model):
    """Warehouses, addressed by a slug code derived from the name"""
    code = models.CharField(max_length=100, unique=True)
    name = models.CharField(max_length=200)
    city = models.CharField(max_length=100, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    phone = models.CharField(max_length=50, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = slugify_warehouse_name(self.name)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'warehouses'
        ordering = ['name']
