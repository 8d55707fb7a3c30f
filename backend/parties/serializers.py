from rest_framework import serializers
from backend.core.moroccan import ice_validator, if_validator, rc_validator
from .models import Contact


class ContactSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)
    ice = serializers.CharField(max_length=15, required=False, allow_null=True, allow_blank=True, validators=[ice_validator])
    if_number = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True, validators=[if_validator])
    rc = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True, validators=[rc_validator])

    class Meta:
        model = Contact
        fields = [
            'id', 'name', 'company', 'display_name', 'email', 'phone', 'city', 'address',
            'ice', 'if_number', 'rc', 'contact_type', 'status', 'total_transactions',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['total_transactions', 'created_at', 'updated_at']
