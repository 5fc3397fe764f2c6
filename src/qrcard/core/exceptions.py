"""
自定義異常類別，用於詳細的錯誤分類和用戶友善的錯誤訊息
"""

from typing import Optional, Dict, Any, List


class QRCardException(Exception):
    """基礎異常類別"""

    def __init__(self, message: str, user_message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.user_message = user_message  # 顯示給用戶的訊息
        self.details = details or {}  # 額外的除錯資訊


# ==================== 聯絡人資料相關異常 ====================


class ValidationError(QRCardException):
    """必填欄位缺少或為空"""

    def __init__(self, missing_fields: List[str], details: Optional[Dict[str, Any]] = None):
        self.missing_fields = list(missing_fields)
        message = f"Contact data incomplete, missing: {', '.join(self.missing_fields)}"
        user_message = "📝 聯絡人資訊不完整\n\n缺少：\n"
        for field in self.missing_fields:
            user_message += f"✗ {field}\n"
        user_message += "\n請填寫所有必填欄位後再送出"
        super().__init__(message, user_message, details)


class MalformedUrlError(QRCardException):
    """網址無法解析為絕對 URL（非致命，清理時會降級為空字串）"""

    def __init__(self, url: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.url = url
        message = f"Malformed URL: {url!r}"
        user_message = "🔗 網址格式錯誤，已忽略此欄位"
        super().__init__(message, user_message, details)


# ==================== 公開名片相關異常 ====================


class ProfileStorageError(QRCardException):
    """公開名片儲存基礎異常"""

    pass


class SlugExhaustedError(ProfileStorageError):
    """短網址代碼碰撞重試次數已用完"""

    def __init__(self, attempts: int, details: Optional[Dict[str, Any]] = None):
        self.attempts = attempts
        message = f"Could not issue a unique profile slug after {attempts} attempts"
        user_message = (
            "⏱️ 暫時無法建立公開名片網址\n\n"
            "資料未被儲存，請稍後重試"
        )
        super().__init__(message, user_message, details)


# ==================== QR Code 產生相關異常 ====================


class QRRenderError(QRCardException):
    """QR Code 圖片產生失敗"""

    def __init__(self, reason: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        message = f"Failed to render QR code ({reason})" if reason else "Failed to render QR code"
        user_message = (
            "📷 無法產生 QR Code\n\n"
            "可能原因：\n"
            "• 名片內容過長\n"
            "• 圖片格式不支援\n\n"
            "建議：請減少備註內容後重試"
        )
        super().__init__(message, user_message, details)


# ==================== 輔助函數 ====================


def get_user_friendly_message(exception: Exception, verbose: bool = False) -> str:
    """
    從異常中提取用戶友善的錯誤訊息

    Args:
        exception: 異常物件
        verbose: 是否顯示詳細的技術錯誤訊息（開發模式）

    Returns:
        用戶友善的錯誤訊息
    """
    if isinstance(exception, QRCardException):
        message = exception.user_message
        if verbose:
            message += f"\n\n【技術細節】\n錯誤類型：{type(exception).__name__}\n錯誤訊息：{str(exception)}"
            if exception.details:
                message += f"\n額外資訊：{exception.details}"
        return message

    # 非自定義異常，返回預設訊息
    if verbose:
        return f"❌ 系統錯誤\n\n【技術細節】\n{type(exception).__name__}: {str(exception)}"
    else:
        return "❌ 系統錯誤，請稍後重試"
