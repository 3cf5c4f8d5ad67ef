# -*- coding: utf-8 -*-
"""
共用模板與提示訊息（toast）
提示訊息放在轉址的 query string：?toast=...&toast_type=success|error
"""

from urllib.parse import urlencode

from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from .config import TEMPLATE_DIR, settings


templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
templates.env.globals["app_name"] = settings.APP_NAME


def redirect_with_toast(url: str, message: str, toast_type: str = "success", **params) -> RedirectResponse:
    """轉址並帶上提示訊息"""
    query = dict(params)
    query["toast"] = message
    query["toast_type"] = toast_type
    separator = "&" if "?" in url else "?"
    return RedirectResponse(url=f"{url}{separator}{urlencode(query)}", status_code=303)


def format_date(value, fmt: str = "%d/%m/%Y") -> str:
    """日期顯示 (dd/mm/aaaa)"""
    if not value:
        return "-"
    return value.strftime(fmt)


templates.env.filters["date_br"] = format_date
