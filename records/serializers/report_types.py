from rest_framework import serializers

from .common import CleanCharField


class ReportTypeSerializer(serializers.Serializer):
    areaId = serializers.IntegerField(min_value=1)
    name = CleanCharField(max_length=100)
    description = CleanCharField(max_length=500, required=False, allow_null=True, allow_blank=True)

    def validate_name(self, v):
        if not v:
            raise serializers.ValidationError('Report type name is required')
        return v


class ReportTypeListQuerySerializer(serializers.Serializer):
    areaId = serializers.IntegerField(min_value=1, required=False)
