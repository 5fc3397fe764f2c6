"""聯絡人模型測試"""

from src.qrcard.core.models.contact import (
    Address,
    Contact,
    ContactCreated,
    PublicProfile,
    QRCardSubmission,
)


class TestContact:
    """Contact 模型測試"""

    def test_camel_case_wire_names(self):
        contact = Contact.model_validate({
            "firstName": "Ada",
            "lastName": "Lovelace",
            "workPhone": "020 7183 8750",
        })
        assert contact.first_name == "Ada"
        assert contact.last_name == "Lovelace"
        assert contact.work_phone == "020 7183 8750"

    def test_snake_case_names_accepted(self):
        contact = Contact(first_name="Ada", last_name="Lovelace")
        assert contact.full_name == "Ada Lovelace"

    def test_none_and_whitespace_cleaned(self):
        contact = Contact.model_validate({
            "firstName": "  Ada ",
            "title": None,
            "socials": {"linkedin": None},
            "address": None,
        })
        assert contact.first_name == "Ada"
        assert contact.title == ""
        assert contact.socials == {"linkedin": ""}
        assert contact.address.is_empty()

    def test_missing_required_fields(self):
        contact = Contact(first_name="Ada", mobile="5551234567")
        assert contact.missing_required_fields() == ["lastName", "email"]

    def test_no_missing_fields(self, sample_contact):
        assert sample_contact.missing_required_fields() == []

    def test_dump_by_alias(self, sample_contact):
        data = sample_contact.model_dump(by_alias=True)
        assert data["firstName"] == "Ada"
        assert data["workPhone"] == "+44 20 7183 8750"
        assert data["address"]["postalCode"] == "SW1Y 4JH"


class TestAddress:
    """Address 模型測試"""

    def test_widget_aliases(self):
        address = Address.model_validate({"state": "CA", "postal": "94016"})
        assert address.region == "CA"
        assert address.postal_code == "94016"

    def test_is_empty(self):
        assert Address().is_empty()
        assert not Address(country="UK").is_empty()


class TestSubmission:
    """QRCardSubmission 測試"""

    def test_defaults(self):
        submission = QRCardSubmission.model_validate({})
        assert submission.contact.first_name == ""
        assert submission.consent.text is None
        assert submission.qr is None

    def test_null_sections(self):
        submission = QRCardSubmission.model_validate({"contact": None, "consent": None})
        assert submission.contact.missing_required_fields() == [
            "firstName", "lastName", "email", "mobile"
        ]

    def test_qr_design(self, sample_submission):
        assert sample_submission.qr.design.ecc == "M"
        assert sample_submission.qr.design.margin == 1


class TestResponses:
    """回應模型測試"""

    def test_contact_created_wire_format(self):
        created = ContactCreated(contact_id=7, slug="abcd1234", profile_url="/c/abcd1234")
        assert created.model_dump(by_alias=True) == {
            "contactId": 7,
            "profileUrl": "/c/abcd1234",
        }

    def test_public_profile_dict(self, sample_contact):
        profile = PublicProfile(contact_id=3, slug="abcd1234", view_count=2, contact=sample_contact)
        data = profile.to_public_dict()
        assert data["vcardUrl"] == "/api/contacts/3.vcf"
        assert data["viewCount"] == 2
        assert data["firstName"] == "Ada"
