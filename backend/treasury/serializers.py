from rest_framework import serializers
from .models import BankAccount, WarehouseCash, Payment


class BankAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = BankAccount
        fields = ['id', 'name', 'bank', 'account_number', 'balance', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class WarehouseCashSerializer(serializers.ModelSerializer):
    warehouse_code = serializers.CharField(source='warehouse.code', read_only=True)
    warehouse_name = serializers.CharField(source='warehouse.name', read_only=True)

    class Meta:
        model = WarehouseCash
        fields = ['id', 'warehouse', 'warehouse_code', 'warehouse_name', 'amount', 'updated_at']
        read_only_fields = ['warehouse', 'updated_at']


class PaymentSerializer(serializers.ModelSerializer):
    payment_method_display = serializers.CharField(source='get_payment_method_display', read_only=True)
    bank_account_name = serializers.CharField(source='bank_account.name', read_only=True, default=None)
    warehouse_code = serializers.CharField(source='warehouse.code', read_only=True, default=None)

    class Meta:
        model = Payment
        fields = [
            'id', 'invoice_number', 'sales_invoice', 'purchase_invoice', 'entity', 'amount',
            'payment_method', 'payment_method_display', 'bank', 'check_number', 'maturity_date',
            'status', 'payment_date', 'payment_type', 'bank_account', 'bank_account_name',
            'warehouse', 'warehouse_code', 'notes', 'created_at', 'updated_at'
        ]
        read_only_fields = ['sales_invoice', 'purchase_invoice', 'created_at', 'updated_at']
        extra_kwargs = {
            'payment_date': {'required': False},
            'status': {'required': False},
        }

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero")
        return value

    def validate(self, attrs):
        method = attrs.get('payment_method', getattr(self.instance, 'payment_method', None))
        if method != 'check':
            attrs['check_number'] = None
        return attrs


class PaymentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Payment.STATUS_CHOICES)
