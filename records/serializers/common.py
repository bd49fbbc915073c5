import bleach
from rest_framework import serializers


def clean_text(value):
    """Strip markup and surrounding whitespace from free text."""
    if value is None:
        return None
    return bleach.clean(str(value), tags=[], strip=True).strip()


class CleanCharField(serializers.CharField):
    """CharField whose value is passed through bleach before validation."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        return clean_text(value)


class SearchQuerySerializer(serializers.Serializer):
    q = serializers.CharField(min_length=1, max_length=100)
