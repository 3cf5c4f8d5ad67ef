# -*- coding: utf-8 -*-
"""
寄信服務 - 透過 HTTP 郵件 API（密碼重設信）
"""

import logging
from typing import Any, Dict

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, body: str) -> Dict[str, Any]:
    """
    寄出一封純文字信

    Args:
        to: 收件人
        subject: 主旨
        body: 內文

    Returns:
        {"success": bool, ...}
    """
    if not settings.MAIL_API_URL:
        logger.warning("MAIL_API_URL 未設定，略過寄信給 %s", to)
        return {"success": False, "error": "MAIL_API_URL not configured"}

    headers = {"Content-Type": "application/json"}
    if settings.MAIL_API_KEY:
        headers["Authorization"] = f"Bearer {settings.MAIL_API_KEY}"

    try:
        response = httpx.post(
            settings.MAIL_API_URL,
            headers=headers,
            json={
                "from": settings.MAIL_FROM,
                "to": to,
                "subject": subject,
                "text": body,
            },
            timeout=10.0,
        )

        if response.status_code < 300:
            return {"success": True}

        logger.error("寄信失敗 %s: %s", response.status_code, response.text)
        return {
            "success": False,
            "error": response.text,
            "status_code": response.status_code,
        }

    except httpx.HTTPError as e:
        logger.error("寄信失敗: %s", e)
        return {"success": False, "error": str(e)}
