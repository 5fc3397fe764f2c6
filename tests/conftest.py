import pytest
import os
import sys
import tempfile

# 添加項目根目錄到 Python 路徑
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

# 匯入 app.py 時會建立資料庫，先指到暫存目錄
os.environ.setdefault('QRCARD_DB_PATH', os.path.join(tempfile.mkdtemp(prefix='qrcard-'), 'app.db'))

from simple_config import Settings
from src.qrcard.core.models.contact import Contact, QRCardSubmission
from src.qrcard.core.services.profile_service import ProfileService
from src.qrcard.infrastructure.storage.profile_db import ProfileDatabase
from src.qrcard.api.web.main import create_app


@pytest.fixture
def test_db():
    """暫存 SQLite 資料庫"""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield ProfileDatabase(os.path.join(tmp_dir, 'test.db'))


@pytest.fixture
def profile_service(test_db):
    """使用暫存資料庫的 ProfileService"""
    return ProfileService(test_db)


@pytest.fixture
def test_settings(test_db):
    """測試用設定"""
    return Settings(QRCARD_DB_PATH=test_db.db_path, cors_origin='https://cards.example.com')


@pytest.fixture
def app(test_settings, test_db):
    flask_app = create_app(test_settings, db=test_db)
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    """Flask 測試客戶端"""
    with app.test_client() as client:
        yield client


@pytest.fixture
def sample_contact():
    """範例聯絡人"""
    return Contact(
        first_name="Ada",
        last_name="Lovelace",
        title="Analyst",
        company="Analytical Engines Ltd",
        email="ada@example.com",
        mobile="5551234567",
        work_phone="+44 20 7183 8750",
        website="https://Example.com",
        socials={"linkedin": "https://linkedin.com/in/ada", "twitter": "not a url"},
        address={
            "street": "12 St James's Square",
            "city": "London",
            "state": "",
            "postal": "SW1Y 4JH",
            "country": "UK",
        },
        notes="Met at the Babbage lecture",
    )


@pytest.fixture
def sample_payload():
    """POST /api/qr-cards 範例內容"""
    return {
        "contact": {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "mobile": "5551234567",
        },
        "consent": {"text": "I agree to share my contact details."},
        "qr": {"type": "vcard", "design": {"ecc": "M", "margin": 1}},
    }


@pytest.fixture
def sample_submission(sample_payload):
    return QRCardSubmission.model_validate(sample_payload)
