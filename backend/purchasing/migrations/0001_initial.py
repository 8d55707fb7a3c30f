# Generated manually

import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

PAYMENT_METHOD_CHOICES = [('cash', 'Espèces'), ('check', 'Chèque'), ('bank_transfer', 'Virement bancaire')]

def document_fields():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('document_id', models.CharField(max_length=50, unique=True)),
        ('date', models.DateField()),
        ('note', models.TextField(blank=True, null=True)),
        ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
    ]

def taxed_fields():
    return document_fields() + [
        ('vat_rate', models.DecimalField(decimal_places=2, default=Decimal('20.00'), max_digits=5)),
        ('vat_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
        ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
    ]

def item_fields(parent_name, parent_model):
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('description', models.CharField(blank=True, default='', max_length=500)),
        ('quantity', models.DecimalField(decimal_places=2, max_digits=12)),
        ('unit_price', models.DecimalField(decimal_places=2, max_digits=14)),
        ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='catalog.product')),
        (parent_name, models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to=parent_model)),
    ]


DOCUMENT_ORDERING = ['-date', '-created_at']


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
        ('parties', '0001_initial'),
        ('sales', '0001_initial'),
        ('treasury', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PurchaseOrder',
            fields=document_fields() + [
                ('status', models.CharField(choices=[('draft', 'Draft'), ('sent', 'Sent'), ('confirmed', 'Confirmed'), ('received', 'Received'), ('cancelled', 'Cancelled')], default='draft', max_length=20)),
                ('stock_received_at', models.DateTimeField(blank=True, null=True)),
                ('supplier', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchase_orders', to='parties.contact')),
                ('warehouse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='purchase_orders', to='locations.warehouse')),
            ],
            options={
                'db_table': 'purchase_orders',
                'ordering': DOCUMENT_ORDERING,
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='PurchaseOrderItem',
            fields=item_fields('purchase_order', 'purchasing.purchaseorder'),
            options={
                'db_table': 'purchase_order_items',
                'ordering': ['id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='PurchaseInvoice',
            fields=taxed_fields() + [
                ('due_date', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('received', 'Received'), ('partially_paid', 'Partially Paid'), ('paid', 'Paid'), ('overdue', 'Overdue'), ('cancelled', 'Cancelled')], default='draft', max_length=20)),
                ('payment_method', models.CharField(blank=True, choices=PAYMENT_METHOD_CHOICES, max_length=20, null=True)),
                ('check_number', models.CharField(blank=True, max_length=100, null=True)),
                ('amount_paid', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('attachment_url', models.CharField(blank=True, max_length=500, null=True)),
                ('supplier', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchase_invoices', to='parties.contact')),
                ('bank_account', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='purchase_invoices', to='treasury.bankaccount')),
                ('delivery_note', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='purchase_invoices', to='sales.deliverynote')),
            ],
            options={
                'db_table': 'purchase_invoices',
                'ordering': DOCUMENT_ORDERING,
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='PurchaseInvoiceItem',
            fields=item_fields('purchase_invoice', 'purchasing.purchaseinvoice'),
            options={
                'db_table': 'purchase_invoice_items',
                'ordering': ['id'],
                'abstract': False,
            },
        ),
        migrations.AddIndex(
            model_name='purchaseorder',
            index=models.Index(fields=['status', '-date'], name='idx_po_status_date'),
        ),
        migrations.AddIndex(
            model_name='purchaseorder',
            index=models.Index(fields=['supplier'], name='idx_po_supplier'),
        ),
        migrations.AddIndex(
            model_name='purchaseinvoice',
            index=models.Index(fields=['status', '-date'], name='idx_pi_status_date'),
        ),
        migrations.AddIndex(
            model_name='purchaseinvoice',
            index=models.Index(fields=['supplier'], name='idx_pi_supplier'),
        ),
        migrations.AddIndex(
            model_name='purchaseinvoice',
            index=models.Index(fields=['delivery_note'], name='idx_pi_delivery_note'),
        ),
    ]
