from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)

    def validate_email(self, v):
        return (v or '').strip().lower()

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v
