import json

import pytest
import requests

from uniprice.services.ai_service import GeminiService
from uniprice.services.image_service import ImageService, normalize_image_url
from uniprice.services.notification_service import NotificationService, foreground_alert
from uniprice.tests.fakes import FakeResponse, gemini_response


@pytest.fixture
def images(settings_repo, http):
    return ImageService(settings_repo, GeminiService('k', http=http), folder_id='folder-1', http=http)


def test_normalize_image_url():
    assert normalize_image_url('https://drive.google.com/uc?id=XyZ_9') == 'https://lh3.googleusercontent.com/d/XyZ_9'
    assert normalize_image_url('https://cdn.example/a.png') == 'https://cdn.example/a.png'
    assert normalize_image_url('') == ''


@pytest.mark.parametrize('link', [
    'https://drive.google.com/uc?export=view&id=1AbC-9_z',
    'https://drive.google.com/uc?id=1AbC-9_z&resourcekey=0-xYz',
    'https://drive.google.com/file/d/1AbC-9_z/view?usp=sharing',
    'https://drive.google.com/file/d/1AbC-9_z',
    'https://drive.google.com/open?id=1AbC-9_z&authuser=0',
])
def test_legacy_drive_links_become_embeddable(link):
    assert normalize_image_url(link) == 'https://lh3.googleusercontent.com/d/1AbC-9_z'


def test_set_url(images):
    assert images.set_url('https://cdn.example/a.png')['url'] == 'https://cdn.example/a.png'
    assert images.set_url('data:image/png;base64,AAAA')['ok'] is True
    assert images.set_url('ftp://x')['ok'] is False
    assert images.set_url('')['ok'] is False


def test_upload_requires_drive_connection(images, http):
    result = images.upload(b'img', 'a.png', 'image/png')
    assert result['auth_required'] is True
    assert http.calls == []


def test_upload_rejects_other_file_types(images):
    images.connect_drive('tok', 3600)
    assert images.upload(b'%PDF', 'a.pdf', 'application/pdf')['ok'] is False


def test_upload_creates_file_and_public_permission(images, http):
    images.connect_drive('tok', 3600)
    http.queue(FakeResponse(200, {'id': 'file-42'}), FakeResponse(200, {}))

    result = images.upload(b'img', 'a.png', 'image/png')

    assert result == {'ok': True, 'url': 'https://lh3.googleusercontent.com/d/file-42'}
    upload, permission = http.calls
    assert upload['headers']['Authorization'] == 'Bearer tok'
    metadata = json.loads(upload['files']['metadata'][1])
    assert metadata == {'name': 'a.png', 'mimeType': 'image/png', 'parents': ['folder-1']}
    assert 'file-42/permissions' in permission['url']
    assert permission['json'] == {'role': 'reader', 'type': 'anyone'}


def test_permission_failure_still_returns_url(images, http):
    images.connect_drive('tok', 3600)
    http.queue(FakeResponse(200, {'id': 'file-7'}), FakeResponse(403, {}))

    assert images.upload(b'img', 'a.png', 'image/png')['url'].endswith('/file-7')


def test_upload_failure(images, http):
    images.connect_drive('tok', 3600)
    http.queue(requests.ConnectionError('reset'))

    assert images.upload(b'img', 'a.png', 'image/png') == {'ok': False, 'error': 'Upload failed'}


def test_drive_connection_lifecycle(images):
    assert images.connect_drive('', 3600)['ok'] is False
    assert images.connect_drive('tok', 'soon')['ok'] is False
    assert images.connect_drive('tok', 60)['ok'] is True
    assert images.drive_status()['connected'] is True
    images.disconnect_drive()
    assert images.drive_status()['connected'] is False


def test_analyze(images, http):
    http.queue(gemini_response({'name': 'Mug', 'description': 'Ceramic', 'category': 'Houseware'}))
    result = images.analyze(b'img', 'image/jpeg')
    assert result['suggestion']['category'] == 'Houseware'

    http.queue(FakeResponse(500, {}))
    assert images.analyze(b'img', 'image/jpeg')['ok'] is False


# =========================================================================
# Notificaciones
# =========================================================================

def test_foreground_alert_text():
    payload = {'notification': {'title': 'Flash Sale', 'body': 'Everything Rs. 80'}}
    assert foreground_alert(payload) == 'New Message: Flash Sale - Everything Rs. 80'


def test_register_push_token(settings_repo):
    service = NotificationService(settings_repo)
    assert service.register_token('abc')['registered'] is True
    assert service.register_token('abc')['registered'] is False
    assert service.register_token('')['ok'] is False
