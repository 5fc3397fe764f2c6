"""
QR Card Web Routes

JSON API for creating contacts and previewing QR codes, the public profile
page and the vCard download.
"""

import os
from flask import Blueprint, Response, current_app, jsonify, render_template, request, abort
from pydantic import ValidationError as ModelValidationError
from pydantic.alias_generators import to_camel
import structlog

from src.qrcard.core.exceptions import (
    QRCardException,
    QRRenderError,
    SlugExhaustedError,
    ValidationError,
    get_user_friendly_message,
)
from src.qrcard.core.models.contact import QRCardSubmission, QRDesign
from src.qrcard.core.services.normalizer import normalize_contact
from src.qrcard.core.services.vcard_builder import (
    PREVIEW_VCARD_FILENAME,
    VCARD_MIME_TYPE,
    build_vcard,
    vcard_filename,
)
from src.qrcard.api.web.qr_renderer import PNG_FILENAME, SVG_FILENAME

logger = structlog.get_logger()

_current_dir = os.path.dirname(os.path.abspath(__file__))

web_bp = Blueprint(
    "qrcard",
    __name__,
    template_folder=os.path.join(_current_dir, "templates"),
)


def _service():
    return current_app.extensions["qrcard"]["service"]


def _renderer():
    return current_app.extensions["qrcard"]["renderer"]


def _settings():
    return current_app.extensions["qrcard"]["settings"]


def _parse_submission() -> QRCardSubmission:
    """解析 JSON 請求，格式錯誤時回 400"""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="Request body must be a JSON object")
    try:
        return QRCardSubmission.model_validate(payload)
    except ModelValidationError as e:
        logger.info("Malformed submission", errors=e.error_count())
        abort(400, description="Malformed contact payload")


def _attachment(body, mimetype: str, filename: str) -> Response:
    response = Response(body, mimetype=mimetype)
    response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


def _error_body(error: QRCardException) -> dict:
    return {
        "error": str(error),
        "message": get_user_friendly_message(error, verbose=_settings().verbose_errors),
    }


# ==================== Error Handlers ====================

@web_bp.errorhandler(ValidationError)
def handle_validation_error(error: ValidationError):
    body = _error_body(error)
    body["missingFields"] = error.missing_fields
    return jsonify(body), 400


@web_bp.errorhandler(SlugExhaustedError)
def handle_slug_exhausted(error: SlugExhaustedError):
    return jsonify(_error_body(error)), 503


@web_bp.errorhandler(QRRenderError)
def handle_render_error(error: QRRenderError):
    return jsonify(_error_body(error)), 422


@web_bp.errorhandler(400)
def handle_bad_request(error):
    return jsonify({"error": error.description}), 400


# ==================== Contact Submission ====================

@web_bp.route("/api/qr-cards", methods=["POST"])
def create_qr_card():
    """建立聯絡人與公開名片"""
    submission = _parse_submission()
    created = _service().submit_card(
        submission,
        ip=request.remote_addr,
        user_agent=request.headers.get("User-Agent", ""),
    )
    return jsonify(created.model_dump(by_alias=True))


# ==================== Preview / Export ====================

def _preview_vcard(submission: QRCardSubmission) -> str:
    return build_vcard(normalize_contact(submission.contact))


def _preview_design(submission: QRCardSubmission) -> QRDesign:
    settings = _settings()
    if submission.qr is not None:
        return submission.qr.design
    return QRDesign(ecc=settings.qr_error_correction, margin=settings.qr_margin)


@web_bp.route("/api/qr-cards/preview", methods=["POST"])
def preview_vcard():
    """預覽 vCard 文字（即 QR Code 內容）"""
    submission = _parse_submission()
    return jsonify({"vcard": _preview_vcard(submission)})


@web_bp.route("/api/qr-cards/preview.vcf", methods=["POST"])
def preview_vcf():
    submission = _parse_submission()
    return _attachment(
        _preview_vcard(submission),
        f"{VCARD_MIME_TYPE}; charset=utf-8",
        PREVIEW_VCARD_FILENAME,
    )


@web_bp.route("/api/qr-cards/preview.png", methods=["POST"])
def preview_png():
    submission = _parse_submission()
    design = _preview_design(submission)
    image = _renderer().render_png(_preview_vcard(submission), ecc=design.ecc, margin=design.margin)
    return _attachment(image, "image/png", PNG_FILENAME)


@web_bp.route("/api/qr-cards/preview.svg", methods=["POST"])
def preview_svg():
    submission = _parse_submission()
    design = _preview_design(submission)
    image = _renderer().render_svg(_preview_vcard(submission), ecc=design.ecc, margin=design.margin)
    return _attachment(image, "image/svg+xml", SVG_FILENAME)


# ==================== Public Profile ====================

@web_bp.route("/c/<slug>", methods=["GET"])
def public_profile_page(slug: str):
    """公開名片頁面"""
    profile = _service().get_public_profile(slug)
    if profile is None:
        return Response("Not found", status=404, mimetype="text/plain")

    return render_template(
        "profile.html",
        contact=profile.contact,
        vcard_url=profile.vcard_url,
    )


@web_bp.route("/api/profiles/<slug>", methods=["GET"])
def public_profile_json(slug: str):
    """公開名片 JSON"""
    profile = _service().get_public_profile(slug)
    if profile is None:
        return jsonify({"error": "Not found"}), 404
    return jsonify(profile.to_public_dict())


@web_bp.route("/api/contacts/<int:contact_id>.vcf", methods=["GET"])
def contact_vcard(contact_id: int):
    """下載 .vcf"""
    vcard = _service().get_contact_vcard(contact_id)
    if vcard is None:
        return Response("Not found", status=404, mimetype="text/plain")
    return _attachment(vcard, f"{VCARD_MIME_TYPE}; charset=utf-8", vcard_filename(contact_id))


# ==================== Admin ====================

@web_bp.route("/api/admin/contacts", methods=["GET"])
def admin_list_contacts():
    """最近的聯絡人（示範用，無驗證）"""
    rows = _service().list_recent_contacts(_settings().admin_list_limit)
    return jsonify({"contacts": [{to_camel(k): v for k, v in row.items()} for row in rows]})
