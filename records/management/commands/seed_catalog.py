"""
Management command to seed the reference catalogs (idempotent).
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from records.models import HealthCenter, MedicalArea, ReportType, Role, SocialSecurityProvider

ROLES = [
    (Role.ADMIN, 'System administrator'),
    (Role.DOCTOR, 'Physician writing medical reports'),
    (Role.PATIENT, 'Patient with read access to own reports'),
]

AREAS = {
    'Cardiology': ['Electrocardiogram', 'Echocardiogram'],
    'Radiology': ['Chest X-ray', 'Abdominal ultrasound'],
    'Clinical Laboratory': ['Complete blood count', 'Lipid panel'],
}

PROVIDERS = ['Public health insurance', 'Private insurance']
CENTERS = [('Central Hospital', None), ('North Clinic', None)]


class Command(BaseCommand):
    help = "Seed roles, medical areas, report types, providers and health centers."

    @transaction.atomic
    def handle(self, *args, **options):
        for name, description in ROLES:
            Role.objects.get_or_create(name=name, defaults={'description': description})
        for area_name, types in AREAS.items():
            area, _ = MedicalArea.objects.get_or_create(name=area_name)
            for type_name in types:
                ReportType.objects.get_or_create(name=type_name, defaults={'area': area})
        for name in PROVIDERS:
            SocialSecurityProvider.objects.get_or_create(name=name)
        for name, address in CENTERS:
            HealthCenter.objects.get_or_create(name=name, defaults={'address': address})

        self.stdout.write(self.style.SUCCESS(
            f"catalog ready: {Role.objects.count()} roles, {MedicalArea.objects.count()} areas, "
            f"{ReportType.objects.count()} report types"
        ))
