# -*- coding: utf-8 -*-
"""
診所路由（僅管理員）
"""

import logging

from fastapi import APIRouter, Request, Depends, Form
from fastapi.responses import HTMLResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import ClinicCreationError
from ..models.user import User
from ..schemas.forms import ClinicForm, form_errors
from ..services import clinics as clinic_service
from ..services.auth import require_admin
from ..templating import templates, redirect_with_toast

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["診所"])


@router.get("/clinics", response_class=HTMLResponse)
async def clinic_list(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """診所列表"""
    return templates.TemplateResponse(request, "dashboard/clinics.html", {
        "user": current_user,
        "clinics": clinic_service.list_clinics(db, active_only=False),
    })


@router.get("/add-clinic", response_class=HTMLResponse)
async def add_clinic_page(
    request: Request,
    current_user: User = Depends(require_admin),
):
    """新增診所頁面"""
    return templates.TemplateResponse(request, "dashboard/add_clinic.html", {
        "user": current_user,
        "errors": {},
        "values": {},
    })


@router.post("/add-clinic", response_class=HTMLResponse)
async def add_clinic(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    address: str = Form(""),
    phone: str = Form(""),
    cnpj: str = Form(""),
    social_reason: str = Form(""),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """新增診所：建立帳號、診所，並寄出設定密碼信"""
    values = {
        "name": name, "email": email, "address": address,
        "phone": phone, "cnpj": cnpj, "social_reason": social_reason,
    }

    try:
        form = ClinicForm(password=password, **values)
    except ValidationError as e:
        return templates.TemplateResponse(request, "dashboard/add_clinic.html", {
            "user": current_user,
            "errors": form_errors(e),
            "values": values,
        }, status_code=400)

    try:
        clinic_service.create_clinic_account(db, form, str(request.base_url))
    except ClinicCreationError as e:
        logger.error("❌ 新增診所失敗 %s", e)
        return redirect_with_toast("/dashboard/add-clinic", e.message, "error")

    return redirect_with_toast("/dashboard/clinics", clinic_service.SUCCESS_MESSAGE)
