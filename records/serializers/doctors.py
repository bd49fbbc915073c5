from rest_framework import serializers


class DoctorSerializer(serializers.Serializer):
    personId = serializers.IntegerField(min_value=1)
    licenseNumber = serializers.CharField(min_length=5, max_length=50)
    areaId = serializers.IntegerField(min_value=1)
    isActive = serializers.BooleanField(required=False)


class DoctorListQuerySerializer(serializers.Serializer):
    areaId = serializers.IntegerField(min_value=1, required=False)
    includeInactive = serializers.BooleanField(required=False, default=False)
