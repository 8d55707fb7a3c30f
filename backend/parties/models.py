from django.db import models


class Contact(models.Model):
    """Client or supplier"""
    TYPE_CHOICES = [
        ('client', 'Client'),
        ('supplier', 'Supplier'),
    ]
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]

    name = models.CharField(max_length=255)
    company = models.CharField(max_length=255, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=50, blank=True, null=True)
    city = models.CharField(max_length=100, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    ice = models.CharField(max_length=15, blank=True, null=True)
    if_number = models.CharField(max_length=20, blank=True, null=True)
    rc = models.CharField(max_length=20, blank=True, null=True)
    contact_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    total_transactions = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def display_name(self):
        return self.company or self.name

    def __str__(self):
        return self.display_name

    class Meta:
        db_table = 'contacts'
        ordering = ['name']
        indexes = [
            models.Index(fields=['contact_type', 'status'], name='idx_contact_type_status'),
            models.Index(fields=['name'], name='idx_contact_name'),
        ]
