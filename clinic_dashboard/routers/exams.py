# -*- coding: utf-8 -*-
"""
檢查路由 - 新增檢查精靈（三步驟）與病人搜尋 API
步驟：initial（既有/新病人）→ existing-patient（搜尋選擇）→ create-exam（檢查表單）
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import NotFound
from ..models.exam import EXAM_TYPES
from ..models.user import User, UserRole
from ..schemas.forms import ExamForm, form_errors
from ..services import exams as exam_service
from ..services import patients as patient_service
from ..services.auth import require_role
from ..templating import templates, redirect_with_toast

logger = logging.getLogger(__name__)

router = APIRouter(tags=["檢查"])

# 管理員或診所帳號
require_member = require_role(UserRole.ADMIN.value, UserRole.CLINIC.value)

WIZARD_STEPS = ("initial", "existing-patient", "create-exam")


@router.get("/dashboard/add-exam", response_class=HTMLResponse)
async def add_exam_wizard(
    request: Request,
    step: str = "initial",
    patient_id: Optional[int] = None,
    q: str = "",
    db: Session = Depends(get_db),
    current_user: User = Depends(require_member),
):
    """新增檢查精靈"""
    if step not in WIZARD_STEPS:
        step = "initial"

    context = {
        "user": current_user,
        "step": step,
        "q": q,
        "exam_types": EXAM_TYPES,
        "errors": {},
        "values": {},
    }

    if step == "existing-patient":
        results = patient_service.search_patients_for_exam(db, current_user, q)
        if results is None:
            # 字數不足，沿用預設列表
            results = patient_service.search_patients_for_exam(db, current_user, "")
        context["patients"] = results

    elif step == "create-exam":
        if not patient_id:
            return redirect_with_toast("/dashboard/add-exam?step=existing-patient", "Selecione um paciente", "error")
        try:
            context["patient"] = patient_service.get_patient_for_user(db, current_user, patient_id)
        except NotFound as e:
            return redirect_with_toast("/dashboard/add-exam?step=existing-patient", e.message, "error")

    return templates.TemplateResponse(request, "dashboard/add_exam.html", context)


@router.post("/dashboard/add-exam/choose")
async def choose_patient_type(
    choice: str = Form("existing"),
    current_user: User = Depends(require_member),
):
    """第一步：既有病人 → 搜尋；新病人 → 新增病人頁"""
    if choice == "new":
        return RedirectResponse(url="/dashboard/add-patient", status_code=303)
    return RedirectResponse(url="/dashboard/add-exam?step=existing-patient", status_code=303)


@router.post("/dashboard/add-exam", response_class=HTMLResponse)
async def add_exam(
    request: Request,
    patient_id: int = Form(...),
    exam_type: str = Form(""),
    exam_date: str = Form(""),
    result: str = Form(""),
    notes: str = Form(""),
    appeared_on_exam: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_member),
):
    """第三步：建立檢查"""
    try:
        patient = patient_service.get_patient_for_user(db, current_user, patient_id)
    except NotFound as e:
        return redirect_with_toast("/dashboard/add-exam?step=existing-patient", e.message, "error")

    values = {
        "exam_type": exam_type, "exam_date": exam_date,
        "result": result, "notes": notes,
    }
    try:
        form = ExamForm(appeared_on_exam=appeared_on_exam, **values)
    except ValidationError as e:
        return templates.TemplateResponse(request, "dashboard/add_exam.html", {
            "user": current_user,
            "step": "create-exam",
            "q": "",
            "patient": patient,
            "exam_types": EXAM_TYPES,
            "errors": form_errors(e),
            "values": values,
        }, status_code=400)

    exam_service.create_exam(db, patient.id, form)
    return redirect_with_toast("/dashboard/patients", "Exame adicionado com sucesso!")


# ======================
# API
# ======================

@router.get("/api/patients/search")
async def api_search_patients(
    q: str = "",
    db: Session = Depends(get_db),
    current_user: User = Depends(require_member),
):
    """病人搜尋（下拉選單）；字數不足時 patients 為 null，前端保留原列表"""
    return {"patients": patient_service.search_patients_for_exam(db, current_user, q)}
