"""
Medical reports: creation checks, visibility, ownership and images.
"""
from datetime import timedelta

from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from records.models import MedicalReport, ReportImage, Role

from .factories import (
    auth_client, make_center, make_doctor, make_patient, make_person, make_report, make_report_type, make_user,
)

URL = '/api/v1/medical-reports'


def image(n: int = 1) -> dict:
    return {'url': f'https://img.example.com/{n}.png', 'imageType': 'png', 'description': f'slice {n}'}


class ReportTestCase(APITestCase):
    def setUp(self) -> None:
        self.doctor_user = make_user(Role.DOCTOR)
        self.doctor = make_doctor(person=self.doctor_user.person)
        self.other_doctor_user = make_user(Role.DOCTOR)
        self.other_doctor = make_doctor(person=self.other_doctor_user.person)
        self.admin_user = make_user(Role.ADMIN)
        self.patient_user = make_user(Role.PATIENT)
        self.patient = make_patient(person=self.patient_user.person)
        self.report_type = make_report_type(name='Chest X-ray')
        self.center = make_center('Central Hospital')

        self.as_doctor = auth_client(self.doctor_user)
        self.as_other_doctor = auth_client(self.other_doctor_user)
        self.as_admin = auth_client(self.admin_user)
        self.as_patient = auth_client(self.patient_user)

    def payload(self, **overrides):
        data = {
            'patientId': self.patient.id,
            'doctorId': self.doctor.id,
            'reportTypeId': self.report_type.id,
            'centerId': self.center.id,
            'title': 'Chest X-ray results',
            'content': 'No signs of pneumonia.',
        }
        data.update(overrides)
        return data


class CreateReportTests(ReportTestCase):
    def test_doctor_creates_report_with_images(self):
        r = self.as_doctor.post(URL, self.payload(images=[image(1), image(2)]), format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        data = r.json()['data']
        self.assertEqual(data['imageCount'], 2)
        self.assertEqual(data['center']['name'], 'Central Hospital')
        self.assertEqual(data['reportType']['name'], 'Chest X-ray')
        self.assertEqual(ReportImage.objects.filter(report_id=data['id']).count(), 2)

    def test_markup_is_stripped(self):
        r = self.as_doctor.post(URL, self.payload(title='<script>x</script>Findings'), format='json')
        self.assertEqual(r.json()['data']['title'], 'xFindings')

    def test_patient_cannot_create(self):
        r = self.as_patient.post(URL, self.payload(), format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_reference_checks(self):
        cases = [
            ({'patientId': 99999}, 404, 'Patient not found'),
            ({'doctorId': 99999}, 404, 'Doctor not found'),
            ({'reportTypeId': 99999}, 404, 'Report type not found'),
            ({'centerId': 99999}, 404, 'Health center not found'),
        ]
        for overrides, code, message in cases:
            with self.subTest(overrides=overrides):
                r = self.as_admin.post(URL, self.payload(**overrides), format='json')
                self.assertEqual(r.status_code, code)
                self.assertEqual(r.json()['message'], message)
        self.assertEqual(MedicalReport.objects.count(), 0)

    def test_patient_is_checked_before_doctor(self):
        r = self.as_admin.post(URL, self.payload(patientId=99999, doctorId=99999), format='json')
        self.assertEqual(r.json()['message'], 'Patient not found')

    def test_deleted_patient_is_400(self):
        self.patient.is_deleted = True
        self.patient.save()
        r = self.as_doctor.post(URL, self.payload(), format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.json()['message'], 'Patient has been deleted')

    def test_inactive_doctor_is_400(self):
        self.doctor.is_active = False
        self.doctor.save()
        r = self.as_admin.post(URL, self.payload(), format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.json()['message'], 'Doctor is inactive')

    def test_doctor_cannot_sign_as_someone_else(self):
        r = self.as_doctor.post(URL, self.payload(doctorId=self.other_doctor.id), format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_too_many_images_on_create(self):
        r = self.as_doctor.post(URL, self.payload(images=[image(i) for i in range(11)]), format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('images', [e['path'] for e in r.json()['errors']])

    def test_invalid_image_url_path(self):
        r = self.as_doctor.post(URL, self.payload(images=[image(1), {'url': 'not a url'}]), format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual([e['path'] for e in r.json()['errors']], ['images.1.url'])


class ListReportTests(ReportTestCase):
    def setUp(self) -> None:
        super().setUp()
        other_patient = make_patient(person=make_person(first_name='Zoe', last_name='Zapata'))
        self.r1 = make_report(patient=self.patient, doctor=self.doctor, report_type=self.report_type,
                              title='Alpha', content='Fracture of the left wrist')
        self.r2 = make_report(patient=other_patient, doctor=self.other_doctor, report_type=self.report_type,
                              title='Beta', health_center=self.center)
        self.r3 = make_report(patient=other_patient, doctor=self.doctor, report_type=self.report_type,
                              title='Gamma')
        ReportImage.objects.create(report=self.r2, url='https://img.example.com/a.png')
        MedicalReport.objects.filter(pk=self.r1.pk).update(created_at=timezone.now() - timedelta(days=10))

    def test_pagination_block(self):
        r = self.as_admin.get(URL, {'limit': 2, 'page': 1})
        body = r.json()
        self.assertEqual(body['count'], 2)
        self.assertEqual(body['pagination'], {'page': 1, 'limit': 2, 'total': 3, 'totalPages': 2})

    def test_limit_is_capped(self):
        r = self.as_admin.get(URL, {'limit': 500})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.json()['errors'][0]['path'], 'limit')

    def test_filters(self):
        def ids(params):
            return [x['id'] for x in self.as_admin.get(URL, params).json()['data']]

        self.assertEqual(sorted(ids({'doctorId': self.doctor.id})), sorted([self.r1.id, self.r3.id]))
        self.assertEqual(ids({'centerId': self.center.id}), [self.r2.id])
        self.assertEqual(ids({'searchTerm': 'wrist'}), [self.r1.id])
        since = (timezone.now() - timedelta(days=2)).date().isoformat()
        self.assertEqual(sorted(ids({'dateFrom': since})), sorted([self.r2.id, self.r3.id]))

    def test_sorting(self):
        r = self.as_admin.get(URL, {'sortBy': 'title', 'sortOrder': 'asc'})
        self.assertEqual([x['title'] for x in r.json()['data']], ['Alpha', 'Beta', 'Gamma'])
        r = self.as_admin.get(URL, {'sortBy': 'patientName', 'sortOrder': 'desc'})
        self.assertEqual(r.json()['data'][0]['patient']['name'], 'Zoe Zapata')
        r = self.as_admin.get(URL, {'sortBy': 'nonsense'})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patient_only_sees_own_reports(self):
        r = self.as_patient.get(URL)
        self.assertEqual([x['id'] for x in r.json()['data']], [self.r1.id])
        self.assertEqual(self.as_patient.get(f'{URL}/{self.r2.id}').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.as_patient.get(f'{URL}/{self.r1.id}').status_code, status.HTTP_200_OK)

    def test_search_summaries(self):
        r = self.as_admin.get(f'{URL}/search', {'query': 'Beta'})
        data = r.json()['data']
        self.assertEqual(len(data), 1)
        summary = data[0]
        self.assertEqual(summary['patientName'], 'Zoe Zapata')
        self.assertEqual(summary['reportTypeName'], 'Chest X-ray')
        self.assertEqual(summary['centerName'], 'Central Hospital')
        self.assertEqual(summary['imageCount'], 1)
        self.assertTrue(summary['hasImages'])

    def test_search_requires_query(self):
        for params in ({}, {'query': '   '}):
            with self.subTest(params=params):
                r = self.as_admin.get(f'{URL}/search', params)
                self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(r.json()['errors'][0]['path'], 'query')

    def test_unknown_report_is_404(self):
        r = self.as_admin.get(f'{URL}/99999')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.json()['message'], 'Medical report not found')

    def test_requires_authentication(self):
        self.assertEqual(APIClient().get(URL).status_code, status.HTTP_401_UNAUTHORIZED)


class ModifyReportTests(ReportTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.report = make_report(patient=self.patient, doctor=self.doctor, report_type=self.report_type)

    def test_author_updates(self):
        r = self.as_doctor.put(f'{URL}/{self.report.id}', {'title': 'Amended'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.json()['data']['title'], 'Amended')

    def test_other_doctor_cannot_update_or_delete(self):
        r = self.as_other_doctor.put(f'{URL}/{self.report.id}', {'title': 'Hijack'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.as_other_doctor.delete(f'{URL}/{self.report.id}').status_code,
                         status.HTTP_403_FORBIDDEN)

    def test_empty_update_is_400(self):
        r = self.as_doctor.put(f'{URL}/{self.report.id}', {}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_deletes_with_images(self):
        ReportImage.objects.create(report=self.report, url='https://img.example.com/a.png')
        r = self.as_admin.delete(f'{URL}/{self.report.id}')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertFalse(MedicalReport.objects.filter(pk=self.report.id).exists())
        self.assertEqual(ReportImage.objects.count(), 0)

    def test_add_single_and_many_images(self):
        r = self.as_doctor.post(f'{URL}/{self.report.id}/images', image(1), format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.json()['count'], 1)
        r = self.as_doctor.post(f'{URL}/{self.report.id}/images', [image(2), image(3)], format='json')
        self.assertEqual(r.json()['count'], 2)
        r = self.as_patient.get(f'{URL}/{self.report.id}/images')
        self.assertEqual(r.json()['count'], 3)

    def test_image_cap(self):
        ReportImage.objects.bulk_create(
            [ReportImage(report=self.report, url=f'https://img.example.com/{i}.png') for i in range(19)]
        )
        r = self.as_doctor.post(f'{URL}/{self.report.id}/images', [image(1), image(2)], format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(ReportImage.objects.filter(report=self.report).count(), 19)
        r = self.as_doctor.post(f'{URL}/{self.report.id}/images', image(1), format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)

    def test_update_and_delete_image(self):
        img = ReportImage.objects.create(report=self.report, url='https://img.example.com/a.png')
        r = self.as_doctor.patch(f'{URL}/{self.report.id}/images/{img.id}', {'description': 'lateral'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.json()['data']['description'], 'lateral')
        self.assertEqual(self.as_other_doctor.delete(f'{URL}/{self.report.id}/images/{img.id}').status_code,
                         status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.as_doctor.delete(f'{URL}/{self.report.id}/images/{img.id}').status_code,
                         status.HTTP_200_OK)
        self.assertFalse(ReportImage.objects.filter(pk=img.id).exists())

    def test_image_of_other_report_is_404(self):
        other = make_report(doctor=self.doctor)
        img = ReportImage.objects.create(report=other, url='https://img.example.com/b.png')
        r = self.as_doctor.delete(f'{URL}/{self.report.id}/images/{img.id}')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.json()['message'], 'Report image not found')
