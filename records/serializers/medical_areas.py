from rest_framework import serializers

from .common import CleanCharField


class MedicalAreaSerializer(serializers.Serializer):
    name = CleanCharField(max_length=100)
    description = CleanCharField(max_length=500, required=False, allow_null=True, allow_blank=True)

    def validate_name(self, v):
        if not v:
            raise serializers.ValidationError('Medical area name is required')
        return v
