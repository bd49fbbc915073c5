from rest_framework import serializers

from .common import CleanCharField


class PatientSerializer(serializers.Serializer):
    personId = serializers.IntegerField(min_value=1)
    providerId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    affiliateNumber = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    bloodGroup = serializers.CharField(max_length=5, required=False, allow_null=True, allow_blank=True)
    allergies = CleanCharField(max_length=2000, required=False, allow_null=True, allow_blank=True)
    preExistingConditions = CleanCharField(max_length=2000, required=False, allow_null=True, allow_blank=True)
    medications = CleanCharField(max_length=2000, required=False, allow_null=True, allow_blank=True)


class PatientListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    pageSize = serializers.IntegerField(min_value=1, max_value=100, required=False, default=10)
    includeDeleted = serializers.BooleanField(required=False, default=False)
    providerId = serializers.IntegerField(min_value=1, required=False)


class PatientSearchQuerySerializer(serializers.Serializer):
    q = serializers.CharField(min_length=1, max_length=100, required=False)
    dni = serializers.CharField(min_length=1, max_length=20, required=False)

    def validate(self, attrs):
        if not attrs.get('q') and not attrs.get('dni'):
            raise serializers.ValidationError('Provide q or dni')
        return attrs
