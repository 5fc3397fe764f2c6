"""
聯絡人、公開名片與同意紀錄的資料模型

JSON 欄位使用 camelCase（firstName、workPhone ...），Python 端使用 snake_case。
"""

from typing import Optional, Dict, List, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator
from pydantic.alias_generators import to_camel


# 儲存時必填的欄位
REQUIRED_CONTACT_FIELDS = ("first_name", "last_name", "email", "mobile")


def _clean_text(v: Any) -> Any:
    """None 轉空字串，字串去除前後空白"""
    if v is None:
        return ""
    if isinstance(v, str):
        return v.strip()
    return v


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Address(_WireModel):
    """地址（vCard ADR 的各個位置）"""

    street: str = Field("", description="街道")
    city: str = Field("", description="城市")
    region: str = Field("", validation_alias=AliasChoices("region", "state"), description="州/省")
    postal_code: str = Field(
        "",
        validation_alias=AliasChoices("postalCode", "postal_code", "postal"),
        description="郵遞區號",
    )
    country: str = Field("", description="國家")

    @field_validator("*", mode="before")
    @classmethod
    def clean_text(cls, v):
        return _clean_text(v)

    def is_empty(self) -> bool:
        return not any((self.street, self.city, self.region, self.postal_code, self.country))


class Contact(_WireModel):
    """聯絡人資料模型"""

    first_name: str = Field("", description="名")
    last_name: str = Field("", description="姓")
    title: str = Field("", description="職稱")
    company: str = Field("", description="公司名稱")
    email: str = Field("", description="電子郵件")
    mobile: str = Field("", description="手機")
    work_phone: str = Field("", description="公司電話")
    website: str = Field("", description="網站")
    socials: Dict[str, str] = Field(default_factory=dict, description="社群平台 -> 網址")
    address: Address = Field(default_factory=Address, description="地址")
    notes: str = Field("", description="備註")

    @field_validator(
        "first_name", "last_name", "title", "company", "email",
        "mobile", "work_phone", "website", "notes",
        mode="before",
    )
    @classmethod
    def clean_text(cls, v):
        return _clean_text(v)

    @field_validator("socials", mode="before")
    @classmethod
    def clean_socials(cls, v):
        if not v:
            return {}
        return {str(k): _clean_text(url) for k, url in dict(v).items()}

    @field_validator("address", mode="before")
    @classmethod
    def default_address(cls, v):
        return v or {}

    def missing_required_fields(self) -> List[str]:
        """返回缺少的必填欄位（JSON 名稱）"""
        return [to_camel(name) for name in REQUIRED_CONTACT_FIELDS if not getattr(self, name)]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ConsentInput(BaseModel):
    """送出時附帶的同意文字"""

    text: Optional[str] = None


class QRDesign(BaseModel):
    """QR Code 樣式（原樣傳給產生器，不做解讀）"""

    ecc: str = Field("M", pattern="^[LMQH]$", description="錯誤修正等級")
    margin: int = Field(1, ge=0, le=20)


class QRRequest(BaseModel):
    type: str = "vcard"
    design: QRDesign = Field(default_factory=QRDesign)
    payload: Optional[str] = None


class QRCardSubmission(BaseModel):
    """POST /api/qr-cards 請求內容"""

    contact: Contact = Field(default_factory=Contact)
    consent: ConsentInput = Field(default_factory=ConsentInput)
    qr: Optional[QRRequest] = None

    @field_validator("contact", "consent", mode="before")
    @classmethod
    def default_empty(cls, v):
        return v or {}


class Profile(BaseModel):
    """公開名片（slug -> 聯絡人）"""

    id: int
    contact_id: int
    slug: str
    is_public: bool = True
    view_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ConsentRecord(BaseModel):
    """同意紀錄（不可修改）"""

    id: int
    contact_id: int
    consent_text: str
    consent_version: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: Optional[datetime] = None


class ContactCreated(_WireModel):
    """建立成功的回應"""

    contact_id: int
    slug: str = Field(exclude=True)
    profile_url: str


class PublicProfile(BaseModel):
    """公開名片查詢結果"""

    contact_id: int
    slug: str
    view_count: int
    contact: Contact

    @property
    def vcard_url(self) -> str:
        return f"/api/contacts/{self.contact_id}.vcf"

    def to_public_dict(self) -> Dict[str, Any]:
        data = self.contact.model_dump(by_alias=True)
        data["vcardUrl"] = self.vcard_url
        data["viewCount"] = self.view_count
        return data
