"""
QR Card 名片系統 - Flask 應用

create_app() 組裝資料庫、服務與 QR 產生器並註冊路由。
資料庫物件由呼叫端擁有，測試時可注入暫存資料庫。
"""

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request
import structlog

from src.qrcard.api.web.qr_renderer import QRRenderer
from src.qrcard.api.web.routes import web_bp
from src.qrcard.core.services.profile_service import ProfileService
from src.qrcard.infrastructure.storage.profile_db import ProfileDatabase

logger = structlog.get_logger()

SERVICE_NAME = "QR Card Backend"
VERSION = "1.0.0"


def create_app(
    settings,
    db: Optional[ProfileDatabase] = None,
    service: Optional[ProfileService] = None,
    renderer: Optional[QRRenderer] = None,
) -> Flask:
    """
    建立 Flask 應用

    Args:
        settings: simple_config.Settings
        db: ProfileDatabase，未提供時依 settings.database_path 建立
        service: ProfileService，未提供時依 settings 建立
        renderer: QRRenderer，未提供時依 settings 建立
    """
    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["MAX_CONTENT_LENGTH"] = settings.max_content_length

    if service is None:
        db = db or ProfileDatabase(settings.database_path)
        service = ProfileService.from_settings(db, settings)

    renderer = renderer or QRRenderer(
        ecc=settings.qr_error_correction,
        margin=settings.qr_margin,
        box_size=settings.qr_box_size,
    )

    app.extensions["qrcard"] = {
        "settings": settings,
        "service": service,
        "renderer": renderer,
    }
    app.register_blueprint(web_bp)

    @app.before_request
    def handle_preflight():
        """CORS 預檢請求"""
        if request.method == "OPTIONS":
            return "", 204

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = settings.cors_origin
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["X-Content-Type-Options"] = "nosniff"
        return response

    @app.errorhandler(500)
    def handle_server_error(error):
        logger.error("Unhandled server error",
                     path=request.path,
                     error=str(getattr(error, "original_exception", error)))
        return jsonify({"error": "Server error"}), 500

    @app.route("/health", methods=["GET"])
    def health_check():
        """健康檢查端點"""
        return jsonify({
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION,
            "timestamp": str(datetime.now())
        })

    logger.info("QR Card app created", cors_origin=settings.cors_origin)
    return app
