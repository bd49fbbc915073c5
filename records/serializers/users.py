import re

from rest_framework import serializers

from .persons import PersonFieldsSerializer

REGISTER_DNI_RE = re.compile(r'^\d{7,8}$')


def check_password_strength(v: str) -> str:
    problems = []
    if len(v) < 8:
        problems.append('Password must be at least 8 characters long')
    if not re.search(r'[a-z]', v):
        problems.append('Password must contain a lowercase letter')
    if not re.search(r'[A-Z]', v):
        problems.append('Password must contain an uppercase letter')
    if not re.search(r'\d', v):
        problems.append('Password must contain a digit')
    if problems:
        raise serializers.ValidationError(problems)
    return v


class RegisterSerializer(PersonFieldsSerializer):
    email = serializers.EmailField(max_length=255)
    password = serializers.CharField(max_length=128, trim_whitespace=False, write_only=True)
    roleId = serializers.IntegerField(min_value=1)

    def validate_email(self, v):
        return v.strip().lower()

    def validate_password(self, v):
        return check_password_strength(v)

    def validate_dni(self, v):
        v = str(v).strip()
        if not REGISTER_DNI_RE.match(v):
            raise serializers.ValidationError('DNI must have 7 or 8 digits')
        return v


class UserUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=255, required=False)
    password = serializers.CharField(max_length=128, trim_whitespace=False, required=False, write_only=True)
    roleId = serializers.IntegerField(min_value=1, required=False)
    isActive = serializers.BooleanField(required=False)
    isVerified = serializers.BooleanField(required=False)

    def validate_email(self, v):
        return v.strip().lower()

    def validate_password(self, v):
        return check_password_strength(v)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('At least one field must be provided')
        return attrs
