"""Test the student check-in endpoints."""
from attendance_api.models.attendance import AttendanceRecord
from tests.conftest import ANCHOR, ZEROS

def _payload(**overrides):
    payload = {
        'qr_token': 'abc123',
        'latitude': ANCHOR[0],
        'longitude': ANCHOR[1],
        'faces': [ZEROS],
    }
    payload.update(overrides)
    return payload

def test_mark_attendance_success(client, enrolled_student, make_session, auth_headers):
    make_session()
    response = client.post('/api/attendance/mark', headers=auth_headers(enrolled_student),
                           json=_payload())

    assert response.status_code == 200
    body = response.get_json()
    assert body['message'] == 'Attendance marked successfully! (100% match)'
    assert body['data']['record']['status'] == 'present'
    assert body['data']['record']['face_verified'] is True
    assert body['data']['record']['location_verified'] is True
    assert body['data']['location']['distance'] == 0
    assert body['data']['detector'] == 'client'

def test_mark_twice_keeps_one_record(client, enrolled_student, make_session, auth_headers):
    make_session()
    headers = auth_headers(enrolled_student)
    client.post('/api/attendance/mark', headers=headers, json=_payload())
    response = client.post('/api/attendance/mark', headers=headers,
                           json=_payload(latitude=12.9717))

    assert response.status_code == 200
    assert AttendanceRecord.query.count() == 1
    assert AttendanceRecord.query.one().student_lat == 12.9717

def test_outside_range_rejected(client, enrolled_student, make_session, auth_headers):
    make_session()
    response = client.post('/api/attendance/mark', headers=auth_headers(enrolled_student),
                           json=_payload(latitude=12.9816))

    assert response.status_code == 403
    body = response.get_json()
    assert body['reason'] == 'outside_range'
    assert body['distance'] > 1100
    assert body['allowed_radius'] == 150
    assert AttendanceRecord.query.count() == 0

def test_invalid_token_rejected(client, enrolled_student, make_session, auth_headers):
    make_session()
    response = client.post('/api/attendance/mark', headers=auth_headers(enrolled_student),
                           json=_payload(qr_token='nope'))
    assert response.status_code == 403
    assert response.get_json()['message'] == 'Invalid or expired session'

def test_face_rejections(client, enrolled_student, make_session, auth_headers):
    make_session()
    headers = auth_headers(enrolled_student)

    response = client.post('/api/attendance/mark', headers=headers,
                           json=_payload(faces=[[0.9] * 128]))
    assert response.status_code == 401
    assert response.get_json()['reason'] == 'face_not_recognized'

    response = client.post('/api/attendance/mark', headers=headers, json=_payload(faces=[]))
    assert response.status_code == 400
    assert response.get_json()['reason'] == 'no_face_detected'

    response = client.post('/api/attendance/mark', headers=headers,
                           json=_payload(faces=[[0.0] * 64]))
    assert response.status_code == 400
    assert response.get_json()['reason'] == 'embedding_length_mismatch'

    assert AttendanceRecord.query.count() == 0

def test_not_enrolled(client, student, make_session, auth_headers):
    make_session()
    response = client.post('/api/attendance/mark', headers=auth_headers(student), json=_payload())
    assert response.status_code == 400
    assert response.get_json()['reason'] == 'face_not_enrolled'

def test_malformed_coordinates(client, enrolled_student, make_session, auth_headers):
    make_session()
    headers = auth_headers(enrolled_student)
    for bad in ('north', None, 'nan'):
        response = client.post('/api/attendance/mark', headers=headers, json=_payload(latitude=bad))
        assert response.status_code == 400

def test_teachers_cannot_self_mark(client, teacher, make_session, auth_headers):
    make_session()
    response = client.post('/api/attendance/mark', headers=auth_headers(teacher), json=_payload())
    assert response.status_code == 403

def test_verify_location_writes_nothing(client, enrolled_student, make_session, auth_headers):
    make_session()
    headers = auth_headers(enrolled_student)

    response = client.post('/api/attendance/verify-location', headers=headers,
                           json={'qr_token': 'abc123', 'latitude': 12.9816, 'longitude': 77.5946})
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['is_within_range'] is False
    assert data['distance'] > 1100
    assert AttendanceRecord.query.count() == 0

def test_history_lists_own_records(client, enrolled_student, make_session, auth_headers):
    make_session()
    headers = auth_headers(enrolled_student)
    client.post('/api/attendance/mark', headers=headers, json=_payload())

    response = client.get('/api/attendance/history', headers=headers)
    assert response.status_code == 200
    history = response.get_json()['data']
    assert len(history) == 1
    assert history[0]['session_name'] == 'Data Structures'

def test_oversized_numbers_are_validation_errors(client, enrolled_student, make_session,
                                                 auth_headers):
    make_session()
    headers = auth_headers(enrolled_student)

    response = client.post('/api/attendance/mark', headers=headers,
                           json=_payload(latitude=10 ** 400))
    assert response.status_code == 400
    assert response.get_json()['reason'] == 'validation_error'

    response = client.post('/api/attendance/mark', headers=headers,
                           json=_payload(faces=[[int('9' * 400)] + [0.0] * 127]))
    assert response.status_code == 400
    assert response.get_json()['reason'] == 'validation_error'
    assert AttendanceRecord.query.count() == 0

def test_non_string_token_is_invalid_session(client, enrolled_student, make_session, auth_headers):
    make_session()
    response = client.post('/api/attendance/mark', headers=auth_headers(enrolled_student),
                           json=_payload(qr_token=12345))
    assert response.status_code == 403
    assert response.get_json()['reason'] == 'invalid_session'

def test_summary_counts_and_eligibility(client, teacher, student, make_session, auth_headers):
    teacher_headers = auth_headers(teacher)
    for token, status in (('s1', 'present'), ('s2', 'present'), ('s3', 'absent'), ('s4', 'od')):
        session = make_session(token=token)
        client.post(f'/api/sessions/{session.id}/attendance', headers=teacher_headers,
                    json={'student_id': student.id, 'status': status})

    response = client.get('/api/attendance/summary', headers=auth_headers(student))
    assert response.status_code == 200
    summary = response.get_json()['data']
    assert summary['total_sessions'] == 4
    assert summary['present'] == 2
    assert summary['absent'] == 1
    assert summary['od'] == 1
    assert summary['ml'] == 0
    assert summary['attendance_percentage'] == 50
    assert summary['eligibility'] == 'not_eligible'
    assert summary['classes_needed'] == 4
    assert summary['last_attendance'] is not None

def test_summary_without_records(client, student, auth_headers):
    summary = client.get('/api/attendance/summary', headers=auth_headers(student)).get_json()['data']
    assert summary['total_sessions'] == 0
    assert summary['attendance_percentage'] == 0
    assert summary['classes_needed'] == 0
    assert summary['last_attendance'] is None

def test_summary_is_student_only(client, teacher, auth_headers):
    assert client.get('/api/attendance/summary', headers=auth_headers(teacher)).status_code == 403
