# -*- coding: utf-8 -*-
"""
日誌設定 - JSON 格式輸出到 console，可選每日輪替檔案
"""

import json
import logging
import os
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler

from .config import settings


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = None, log_file: str = None) -> logging.Logger:
    """設定根 logger（重複呼叫不會重複加 handler）"""
    logger = logging.getLogger()
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    if getattr(logger, "_clinic_dashboard_configured", False):
        return logger

    console = logging.StreamHandler()
    console.setFormatter(JsonFormatter())
    logger.addHandler(console)

    log_file = log_file if log_file is not None else settings.LOG_FILE
    if log_file:
        # 每日輪替，保留 14 天
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handler = TimedRotatingFileHandler(
            filename=log_file,
            when="midnight",
            backupCount=14,
            encoding="utf-8",
        )
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    logger._clinic_dashboard_configured = True
    return logger
