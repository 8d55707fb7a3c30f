from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, CompanySettings, UserPreference, Notification, AuditLog
from .moroccan import ice_validator, if_validator, rc_validator, tp_validator, cnss_validator


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'phone', 'role', 'status', 'last_login', 'created_at', 'updated_at']
        read_only_fields = ['last_login', 'created_at', 'updated_at']

    def validate_email(self, value):
        value = value.lower().strip()
        queryset = User.objects.filter(email__iexact=value)
        if self.instance:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('Email already in use')
        return value


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'phone', 'password', 'role', 'status']

    def validate_email(self, value):
        value = value.lower().strip()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('User with this email already exists')
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(username=validated_data['email'], **validated_data)
        user.set_password(password)
        user.save()
        return user


class ProfileSerializer(serializers.ModelSerializer):
    """Current user's own profile (role and status are not editable here)"""
    password = serializers.CharField(write_only=True, required=False, validators=[validate_password])
    current_password = serializers.CharField(write_only=True, required=False)

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'phone', 'role', 'status', 'password', 'current_password']
        read_only_fields = ['role', 'status']

    def validate_email(self, value):
        value = value.lower().strip()
        if User.objects.filter(email__iexact=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError('Email already in use')
        return value

    def validate(self, attrs):
        if attrs.get('password'):
            current = attrs.get('current_password')
            if not current or not self.instance.check_password(current):
                raise serializers.ValidationError({'current_password': 'Current password is incorrect'})
        return attrs

    def update(self, instance, validated_data):
        validated_data.pop('current_password', None)
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class CompanySettingsSerializer(serializers.ModelSerializer):
    ice = serializers.CharField(max_length=15, required=False, allow_null=True, allow_blank=True, validators=[ice_validator])
    if_number = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True, validators=[if_validator])
    rc = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True, validators=[rc_validator])
    tp = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True, validators=[tp_validator])
    cnss = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True, validators=[cnss_validator])

    class Meta:
        model = CompanySettings
        fields = ['id', 'name', 'legal_form', 'email', 'phone', 'address', 'ice', 'if_number', 'rc', 'tp',
                  'patente', 'cnss', 'logo', 'footer_text', 'auto_number_documents',
                  'pdf_primary_color', 'pdf_title_color', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class UserPreferenceSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserPreference
        fields = ['theme_color', 'language', 'active_warehouse', 'browser_notifications_enabled',
                  'low_stock_alerts_enabled', 'order_updates_enabled', 'updated_at']
        read_only_fields = ['updated_at']


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'user', 'title', 'message', 'type', 'action_url', 'action_label', 'read', 'read_at', 'created_at']
        read_only_fields = ['read', 'read_at', 'created_at']


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
