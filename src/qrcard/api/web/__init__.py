"""
Web layer for QR Card

Provides the JSON API, public profile page and QR image export.
"""

from src.qrcard.api.web.routes import web_bp

__all__ = ["web_bp"]
