import re

from rest_framework import serializers

from .common import CleanCharField

DNI_RE = re.compile(r'^[0-9A-Za-z]{7,20}$')


class PersonFieldsSerializer(serializers.Serializer):
    """Demographic fields shared by person creation and user registration."""
    dni = serializers.CharField(min_length=7, max_length=20)
    firstName = CleanCharField(max_length=100)
    lastName = CleanCharField(max_length=100)
    birthDate = serializers.DateField(required=False, allow_null=True)
    gender = CleanCharField(max_length=20, required=False, allow_null=True, allow_blank=True)
    phoneNumber = serializers.CharField(max_length=30, required=False, allow_null=True, allow_blank=True)
    primaryEmail = serializers.EmailField(max_length=255, required=False, allow_null=True)
    address = CleanCharField(max_length=255, required=False, allow_null=True, allow_blank=True)
    city = CleanCharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    province = CleanCharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    country = CleanCharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    postalCode = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True)

    def validate_dni(self, v):
        v = (v or '').strip()
        if not DNI_RE.match(v):
            raise serializers.ValidationError('DNI must be 7 to 20 letters or digits')
        return v

    def validate_firstName(self, v):
        if not v:
            raise serializers.ValidationError('First name is required')
        return v

    def validate_lastName(self, v):
        if not v:
            raise serializers.ValidationError('Last name is required')
        return v


class PersonCreateSerializer(PersonFieldsSerializer):
    pass


class PersonUpdateSerializer(PersonFieldsSerializer):
    """Use with ``partial=True``; every field becomes optional."""
