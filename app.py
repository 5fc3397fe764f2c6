#!/usr/bin/env python3
"""
QR Card 名片系統 - 主啟動文件

使用者填寫聯絡資訊後產生 vCard QR Code，可下載 vCard / QR 圖片，
也可儲存到後端並取得公開名片網址 (/c/<slug>)。
"""

import os
import sys
import structlog

# 添加項目根目錄到 Python 路徑
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

# 導入配置和主應用
from simple_config import settings

# 設置日誌
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    context_class=dict,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

from src.qrcard.api.web.main import create_app, VERSION
from src.qrcard.infrastructure.storage.profile_db import ProfileDatabase

# 初始化資料庫（生命週期由此檔案擁有）
profile_db = ProfileDatabase(settings.database_path)
logger.info("Profile database initialized", db_path=profile_db.db_path)

app = create_app(settings, db=profile_db)


def main():
    """主函數"""
    logger.info("Starting QR Card Backend",
                version=VERSION,
                port=settings.app_port,
                environment=settings.flask_env)

    try:
        # 啟動 Flask 應用
        app.run(
            host=settings.app_host,
            port=settings.app_port,
            debug=settings.debug,
            threaded=True
        )
    except KeyboardInterrupt:
        logger.info("Application stopped by user")
    except Exception as e:
        logger.error("Application startup failed", error=str(e))
        sys.exit(1)
    finally:
        logger.info("Application shutdown complete")

# 導出 Flask 應用實例供 gunicorn 使用
application = app

if __name__ == "__main__":
    main()
