from rest_framework import serializers

from .common import CleanCharField

MAX_IMAGES_ON_CREATE = 10
SORT_FIELDS = ['createdAt', 'title', 'patientName', 'doctorName']


class ReportImageSerializer(serializers.Serializer):
    url = serializers.URLField(max_length=500)
    imageType = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    description = CleanCharField(max_length=1000, required=False, allow_null=True, allow_blank=True)


class MedicalReportCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    doctorId = serializers.IntegerField(min_value=1)
    reportTypeId = serializers.IntegerField(min_value=1)
    centerId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    title = CleanCharField(max_length=255)
    content = CleanCharField(max_length=10000)
    images = ReportImageSerializer(many=True, required=False)

    def validate_title(self, v):
        if not v:
            raise serializers.ValidationError('Title is required')
        return v

    def validate_content(self, v):
        if not v:
            raise serializers.ValidationError('Content is required')
        return v

    def validate_images(self, v):
        if len(v) > MAX_IMAGES_ON_CREATE:
            raise serializers.ValidationError(f'A report cannot be created with more than {MAX_IMAGES_ON_CREATE} images')
        return v


class MedicalReportUpdateSerializer(MedicalReportCreateSerializer):
    """Every field optional (``partial=True``); images are managed separately."""
    images = None

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('At least one field must be provided')
        return attrs


class ReportImageUpdateSerializer(ReportImageSerializer):
    pass


class MedicalReportListQuerySerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1, required=False)
    doctorId = serializers.IntegerField(min_value=1, required=False)
    reportTypeId = serializers.IntegerField(min_value=1, required=False)
    centerId = serializers.IntegerField(min_value=1, required=False)
    dateFrom = serializers.DateField(required=False)
    dateTo = serializers.DateField(required=False)
    searchTerm = serializers.CharField(min_length=1, max_length=100, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=10)
    sortBy = serializers.ChoiceField(choices=SORT_FIELDS, required=False, default='createdAt')
    sortOrder = serializers.ChoiceField(choices=['asc', 'desc'], required=False, default='desc')

    def validate(self, attrs):
        start, end = attrs.get('dateFrom'), attrs.get('dateTo')
        if start and end and start > end:
            raise serializers.ValidationError({'dateTo': 'dateTo must not be before dateFrom'})
        return attrs


class MedicalReportSearchQuerySerializer(serializers.Serializer):
    query = serializers.CharField(min_length=1, max_length=100)
