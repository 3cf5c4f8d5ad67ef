# -*- coding: utf-8 -*-
"""
設定檔 - 環境變數
"""

import os
from pathlib import Path
from pydantic_settings import BaseSettings


BASE_DIR = Path(__file__).parent
TEMPLATE_DIR = BASE_DIR / "templates"


class Settings(BaseSettings):
    """應用程式設定"""

    # 應用程式
    APP_NAME: str = "Painel de Clínicas"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # 資料庫
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./clinic_dashboard.db")

    # Session / JWT
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
    JWT_EXPIRATION_DAYS: int = 7
    RESET_TOKEN_MINUTES: int = 60

    # 公開註冊的預設角色（admin / clinic）
    SIGNUP_ROLE: str = os.getenv("SIGNUP_ROLE", "admin")

    # 寄信 API（密碼重設）
    MAIL_API_URL: str = os.getenv("MAIL_API_URL", "")
    MAIL_API_KEY: str = os.getenv("MAIL_API_KEY", "")
    MAIL_FROM: str = os.getenv("MAIL_FROM", "no-reply@clinic-dashboard.local")
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "")

    # 日誌
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "")

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
