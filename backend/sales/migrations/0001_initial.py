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
        ('treasury', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Invoice',
            fields=taxed_fields() + [
                ('due_date', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('sent', 'Sent'), ('partially_paid', 'Partially Paid'), ('paid', 'Paid'), ('overdue', 'Overdue'), ('cancelled', 'Cancelled')], default='draft', max_length=20)),
                ('payment_method', models.CharField(blank=True, choices=PAYMENT_METHOD_CHOICES, max_length=20, null=True)),
                ('check_number', models.CharField(blank=True, max_length=100, null=True)),
                ('amount_paid', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='invoices', to='parties.contact')),
                ('bank_account', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='invoices', to='treasury.bankaccount')),
                ('payment_warehouse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cash_invoices', to='locations.warehouse')),
            ],
            options={
                'db_table': 'invoices',
                'ordering': DOCUMENT_ORDERING,
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='InvoiceItem',
            fields=item_fields('invoice', 'sales.invoice'),
            options={
                'db_table': 'invoice_items',
                'ordering': ['id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='Estimate',
            fields=taxed_fields() + [
                ('status', models.CharField(choices=[('draft', 'Draft'), ('sent', 'Sent'), ('accepted', 'Accepted'), ('rejected', 'Rejected'), ('expired', 'Expired')], default='draft', max_length=20)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='estimates', to='parties.contact')),
                ('converted_invoice', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='source_estimates', to='sales.invoice')),
            ],
            options={
                'db_table': 'estimates',
                'ordering': DOCUMENT_ORDERING,
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='EstimateItem',
            fields=item_fields('estimate', 'sales.estimate'),
            options={
                'db_table': 'estimate_items',
                'ordering': ['id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='DeliveryNote',
            fields=document_fields() + [
                ('document_type', models.CharField(choices=[('delivery_note', 'Bon de Livraison'), ('divers', 'Divers')], default='delivery_note', max_length=20)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('delivered', 'Delivered'), ('cancelled', 'Cancelled')], default='draft', max_length=20)),
                ('client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='delivery_notes', to='parties.contact')),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='supplier_delivery_notes', to='parties.contact')),
                ('warehouse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='delivery_notes', to='locations.warehouse')),
            ],
            options={
                'db_table': 'delivery_notes',
                'ordering': DOCUMENT_ORDERING,
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='DeliveryNoteItem',
            fields=item_fields('delivery_note', 'sales.deliverynote'),
            options={
                'db_table': 'delivery_note_items',
                'ordering': ['id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='CreditNote',
            fields=taxed_fields() + [
                ('status', models.CharField(choices=[('draft', 'Draft'), ('sent', 'Sent'), ('applied', 'Applied'), ('cancelled', 'Cancelled')], default='draft', max_length=20)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='credit_notes', to='parties.contact')),
                ('invoice', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='credit_notes', to='sales.invoice')),
            ],
            options={
                'db_table': 'credit_notes',
                'ordering': DOCUMENT_ORDERING,
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='CreditNoteItem',
            fields=item_fields('credit_note', 'sales.creditnote'),
            options={
                'db_table': 'credit_note_items',
                'ordering': ['id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='Prelevement',
            fields=document_fields() + [
                ('status', models.CharField(choices=[('draft', 'Draft'), ('validated', 'Validated'), ('cancelled', 'Cancelled')], default='draft', max_length=20)),
                ('client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='prelevements', to='parties.contact')),
                ('warehouse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='prelevements', to='locations.warehouse')),
            ],
            options={
                'db_table': 'prelevements',
                'ordering': DOCUMENT_ORDERING,
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='PrelevementItem',
            fields=item_fields('prelevement', 'sales.prelevement'),
            options={
                'db_table': 'prelevement_items',
                'ordering': ['id'],
                'abstract': False,
            },
        ),
        migrations.AddIndex(
            model_name='invoice',
            index=models.Index(fields=['status', '-date'], name='idx_invoice_status_date'),
        ),
        migrations.AddIndex(
            model_name='invoice',
            index=models.Index(fields=['client'], name='idx_invoice_client'),
        ),
        migrations.AddIndex(
            model_name='invoice',
            index=models.Index(fields=['due_date'], name='idx_invoice_due_date'),
        ),
        migrations.AddIndex(
            model_name='estimate',
            index=models.Index(fields=['status', '-date'], name='idx_estimate_status_date'),
        ),
        migrations.AddIndex(
            model_name='estimate',
            index=models.Index(fields=['client'], name='idx_estimate_client'),
        ),
        migrations.AddIndex(
            model_name='deliverynote',
            index=models.Index(fields=['document_type', '-date'], name='idx_delivery_type_date'),
        ),
        migrations.AddIndex(
            model_name='deliverynote',
            index=models.Index(fields=['client'], name='idx_delivery_client'),
        ),
        migrations.AddIndex(
            model_name='deliverynote',
            index=models.Index(fields=['supplier'], name='idx_delivery_supplier'),
        ),
        migrations.AddIndex(
            model_name='creditnote',
            index=models.Index(fields=['status', '-date'], name='idx_credit_note_status_date'),
        ),
        migrations.AddIndex(
            model_name='creditnote',
            index=models.Index(fields=['client'], name='idx_credit_note_client'),
        ),
        migrations.AddIndex(
            model_name='prelevement',
            index=models.Index(fields=['status', '-date'], name='idx_prelevement_status_date'),
        ),
    ]
