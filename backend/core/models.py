from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Application user, logs in with email"""
    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('manager', 'Manager'),
        ('accountant', 'Accountant'),
        ('sales', 'Sales'),
        ('viewer', 'Viewer'),
    ]
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='manager')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    def save(self, *args, **kwargs):
        if not self.username:
            self.username = self.email
        if not self.name:
            self.name = self.get_full_name() or self.username
        # status drives Django's is_active flag
        self.is_active = self.status == 'active'
        super().save(*args, **kwargs)

    @property
    def is_admin_role(self):
        return self.role == 'admin' or self.is_superuser

    def __str__(self):
        return self.email

    class Meta:
        db_table = 'users'


class CompanySettings(models.Model):
    """Company identity printed on documents (single row)"""
    name = models.CharField(max_length=255)
    legal_form = models.CharField(max_length=100, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=50, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    ice = models.CharField(max_length=15, blank=True, null=True)
    if_number = models.CharField(max_length=20, blank=True, null=True)
    rc = models.CharField(max_length=20, blank=True, null=True)
    tp = models.CharField(max_length=20, blank=True, null=True)
    patente = models.CharField(max_length=50, blank=True, null=True)
    cnss = models.CharField(max_length=20, blank=True, null=True)
    logo = models.TextField(blank=True, null=True, help_text="Logo as a data URL")
    footer_text = models.TextField(blank=True, null=True)
    auto_number_documents = models.BooleanField(default=True)
    pdf_primary_color = models.CharField(max_length=20, default='#5B2C6F')
    pdf_title_color = models.CharField(max_length=20, default='#1F2937')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @classmethod
    def get_solo(cls):
        """The settings row, or None before the first save"""
        return cls.objects.order_by('id').first()

    class Meta:
        db_table = 'company_settings'
        verbose_name_plural = 'company settings'


class UserPreference(models.Model):
    """Per-user UI preferences"""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='preferences')
    theme_color = models.CharField(max_length=20, default='light')
    language = models.CharField(max_length=5, default='en')
    active_warehouse = models.CharField(max_length=100, blank=True, null=True, help_text="Warehouse code")
    browser_notifications_enabled = models.BooleanField(default=True)
    low_stock_alerts_enabled = models.BooleanField(default=True)
    order_updates_enabled = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Preferences for {self.user}"

    class Meta:
        db_table = 'user_preferences'


class Notification(models.Model):
    """In-app notification; a null user means it is visible to everyone"""
    TYPE_CHOICES = [
        ('info', 'Info'),
        ('success', 'Success'),
        ('warning', 'Warning'),
        ('error', 'Error'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, null=True, blank=True, related_name='notifications')
    title = models.CharField(max_length=255)
    message = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='info')
    action_url = models.CharField(max_length=500, blank=True, null=True)
    action_label = models.CharField(max_length=100, blank=True, null=True)
    read = models.BooleanField(default=False)
    read_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'read'], name='idx_notification_user_read'),
            models.Index(fields=['-created_at'], name='idx_notification_created'),
        ]


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('status_change', 'Status Change'),
        ('stock_adjust', 'Stock Adjustment'),
        ('payment_add', 'Payment Added'),
        ('payment_revert', 'Payment Reverted'),
        ('convert', 'Document Converted'),
        ('login', 'Login'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., product name, contact name)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., document number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_created'),
            models.Index(fields=['action'], name='idx_audit_action'),
            models.Index(fields=['model_name'], name='idx_audit_model'),
            models.Index(fields=['object_reference'], name='idx_audit_reference'),
        ]
