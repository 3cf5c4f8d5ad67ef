# -*- coding: utf-8 -*-
"""
首頁路由 - 儀表板卡片與圖表 API
"""

from typing import Optional

from fastapi import APIRouter, Request, Depends
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..services import stats as stats_service
from ..services.auth import get_current_user, require_login
from ..templating import templates

router = APIRouter(tags=["首頁"])


@router.get("/")
async def home(
    request: Request,
    db: Session = Depends(get_db),
):
    """首頁 - 已登入進儀表板，否則到登入頁"""
    if get_current_user(request, db):
        return RedirectResponse(url="/dashboard", status_code=302)
    return RedirectResponse(url="/auth/login", status_code=302)


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """儀表板"""
    monthly = stats_service.get_monthly_exam_chart(db, current_user, year)

    return templates.TemplateResponse(request, "dashboard/index.html", {
        "user": current_user,
        "cards": stats_service.get_section_cards(db, current_user),
        "monthly": monthly,
        "types": stats_service.get_exam_type_chart(db, current_user),
        "attendance": stats_service.get_attendance_chart(db, current_user),
    })


# ======================
# 圖表 API
# ======================

@router.get("/api/stats/cards")
async def api_cards(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    return {"cards": stats_service.get_section_cards(db, current_user)}


@router.get("/api/stats/monthly")
async def api_monthly(
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """每月檢查數"""
    return stats_service.get_monthly_exam_chart(db, current_user, year)


@router.get("/api/stats/exam-types")
async def api_exam_types(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    return stats_service.get_exam_type_chart(db, current_user)


@router.get("/api/stats/attendance")
async def api_attendance(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    return stats_service.get_attendance_chart(db, current_user)
