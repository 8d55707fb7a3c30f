from rest_framework import serializers
from .models import TaxReport
from .tax import normalize_quarter


class TaxReportSerializer(serializers.ModelSerializer):
    quarter = serializers.CharField(max_length=10)

    class Meta:
        model = TaxReport
        fields = ['id', 'year', 'quarter', 'data', 'status', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        # upserts on (year, quarter) are handled by the view
        validators = []

    def validate_quarter(self, value):
        try:
            return normalize_quarter(value)
        except ValueError as e:
            raise serializers.ValidationError(str(e))

    def validate_year(self, value):
        if value < 2000 or value > 2100:
            raise serializers.ValidationError('Year out of range')
        return value
