"""
Database models for the medical records API.

A :class:`Person` holds the demographic data shared by users, doctors
and patients; those three link to it one-to-one.  Medical reports tie a
patient, a doctor and a report type together and may carry a list of
image references.
"""
from __future__ import annotations

from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.db import models


class Role(models.Model):
    ADMIN = 'admin'
    DOCTOR = 'doctor'
    PATIENT = 'patient'

    name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True, default='')

    def __str__(self) -> str:
        return self.name


class Person(models.Model):
    """Identity and contact data for anybody known to the system."""
    dni = models.CharField(max_length=20, unique=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    birth_date = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=20, null=True, blank=True)
    phone_number = models.CharField(max_length=30, null=True, blank=True)
    primary_email = models.EmailField(max_length=255, null=True, blank=True)
    address = models.CharField(max_length=255, null=True, blank=True)
    city = models.CharField(max_length=100, null=True, blank=True)
    province = models.CharField(max_length=100, null=True, blank=True)
    country = models.CharField(max_length=100, null=True, blank=True)
    postal_code = models.CharField(max_length=20, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['last_name', 'first_name']

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return f"{self.full_name} ({self.dni})"


class UserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('email is required')
        user = self.model(email=self.normalize_email(email), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user


class User(AbstractBaseUser):
    """Login account.  Authentication is by email; the role drives access."""
    email = models.EmailField(max_length=255, unique=True)
    person = models.OneToOneField(Person, on_delete=models.PROTECT, related_name='user')
    role = models.ForeignKey(Role, on_delete=models.PROTECT, related_name='users')
    is_active = models.BooleanField(default=True)
    is_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS: list[str] = []

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return f"{self.email} ({self.role_id})"


class MedicalArea(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=500, null=True, blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class Doctor(models.Model):
    person = models.OneToOneField(Person, on_delete=models.PROTECT, related_name='doctor')
    license_number = models.CharField(max_length=50, unique=True)
    area = models.ForeignKey(MedicalArea, on_delete=models.PROTECT, related_name='doctors')
    # Doctors are never removed, only deactivated.
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return f"Dr. {self.person.full_name} ({self.license_number})"


class SocialSecurityProvider(models.Model):
    name = models.CharField(max_length=150, unique=True)

    def __str__(self) -> str:
        return self.name


class HealthCenter(models.Model):
    name = models.CharField(max_length=150, unique=True)
    address = models.CharField(max_length=255, null=True, blank=True)

    def __str__(self) -> str:
        return self.name


class Patient(models.Model):
    person = models.OneToOneField(Person, on_delete=models.PROTECT, related_name='patient')
    provider = models.ForeignKey(
        SocialSecurityProvider, null=True, blank=True, on_delete=models.SET_NULL, related_name='patients'
    )
    affiliate_number = models.CharField(max_length=50, null=True, blank=True)
    blood_group = models.CharField(max_length=5, null=True, blank=True)
    allergies = models.TextField(null=True, blank=True)
    pre_existing_conditions = models.TextField(null=True, blank=True)
    medications = models.TextField(null=True, blank=True)
    # Soft delete flag; reports keep pointing at deleted patients.
    is_deleted = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return self.person.full_name


class ReportType(models.Model):
    area = models.ForeignKey(MedicalArea, on_delete=models.PROTECT, related_name='report_types')
    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=500, null=True, blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class MedicalReport(models.Model):
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='reports')
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='reports')
    report_type = models.ForeignKey(ReportType, on_delete=models.PROTECT, related_name='reports')
    health_center = models.ForeignKey(
        HealthCenter, null=True, blank=True, on_delete=models.PROTECT, related_name='reports'
    )
    title = models.CharField(max_length=255)
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"{self.title} #{self.pk}"


class ReportImage(models.Model):
    report = models.ForeignKey(MedicalReport, on_delete=models.CASCADE, related_name='images')
    url = models.URLField(max_length=500)
    image_type = models.CharField(max_length=50, null=True, blank=True)
    description = models.TextField(max_length=1000, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return self.url
