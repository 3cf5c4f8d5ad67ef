# -*- coding: utf-8 -*-
"""
病人路由 - 表格 / 看板、詳細資料、新增、編輯、停用
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Request, Depends, Form
from fastapi.responses import HTMLResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import NotFound, PermissionDenied
from ..models.patient import GENDER_LABELS
from ..models.user import User, UserRole
from ..schemas.forms import PatientForm, PatientUpdateForm, form_errors
from ..services import clinics as clinic_service
from ..services import exams as exam_service
from ..services import patients as patient_service
from ..services import views
from ..services.auth import require_role
from ..templating import templates, redirect_with_toast

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["病人"])

# 管理員或診所帳號
require_member = require_role(UserRole.ADMIN.value, UserRole.CLINIC.value)


def parse_board_year(value: Optional[str]) -> Optional[int]:
    """看板年份：未指定 → 今年；"all" → 全部"""
    if value is None or value == "":
        return date.today().year
    if value == views.ALL:
        return None
    try:
        return int(value)
    except ValueError:
        return date.today().year


# ======================
# 列表（表格 / 看板）
# ======================

@router.get("/patients", response_class=HTMLResponse)
async def patient_list(
    request: Request,
    view: str = "table",
    q: str = "",
    has_exam: str = views.ALL,
    month: str = views.ALL,
    year: str = views.ALL,
    clinic_id: str = views.ALL,
    sort_order: str = "year-asc",
    page: int = 1,
    board_year: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_member),
):
    """病人列表"""
    context = {
        "user": current_user,
        "view": "board" if view == "board" else "table",
        "clinic_options": clinic_service.clinic_options(db) if current_user.is_admin else [],
    }

    if context["view"] == "board":
        exams = exam_service.list_exams_for_user(db, current_user)
        selected_year = parse_board_year(board_year)
        months = views.group_exams_by_month(exams, selected_year)
        context.update({
            "months": months,
            "years": views.available_years(exams),
            "selected_year": selected_year,
            "semester_of": views.semester_of,
            "exam_status": exam_service.exam_status,
        })
        return templates.TemplateResponse(request, "dashboard/patients.html", context)

    flt = views.PatientFilter(
        has_exam=has_exam,
        month=month,
        year=year,
        clinic_id=clinic_id,
        sort_order=sort_order if sort_order in views.SORT_ORDERS else "year-asc",
    )

    patients = patient_service.list_patients_for_user(db, current_user)
    exams_by_patient = patient_service.attach_exams(db, patients)
    filtered = views.filter_patients(patients, flt, current_user.role, exams_by_patient)
    filtered = views.search_by_name(filtered, q)
    result = views.paginate(filtered, page)

    # 年份下拉選單：今年起 20 年加上既有檢查年份
    all_exams = [e for items in exams_by_patient.values() for e in items]

    context.update({
        "page": result,
        "q": q,
        "filter": flt,
        "sorted_exams": {
            p.id: views.sort_exams(exams_by_patient.get(p.id, []), flt.sort_order)
            for p in result.items
        },
        "years": views.filter_year_options(all_exams),
        "month_options": views.MONTH_OPTIONS,
        "sort_orders": views.SORT_ORDERS,
    })
    return templates.TemplateResponse(request, "dashboard/patients.html", context)


# ======================
# 新增病人
# ======================

@router.get("/add-patient", response_class=HTMLResponse)
async def add_patient_page(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_member),
):
    """新增病人頁面"""
    return templates.TemplateResponse(request, "dashboard/add_patient.html", {
        "user": current_user,
        "clinic_options": clinic_service.clinic_options(db) if current_user.is_admin else [],
        "gender_labels": GENDER_LABELS,
        "errors": {},
        "values": {},
    })


@router.post("/add-patient", response_class=HTMLResponse)
async def add_patient(
    request: Request,
    name: str = Form(""),
    birth_date: str = Form(""),
    gender: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    address: str = Form(""),
    rg: str = Form(""),
    cpf: str = Form(""),
    sector: str = Form(""),
    position: str = Form(""),
    clinic_id: str = Form(""),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_member),
):
    """新增病人"""
    values = {
        "name": name, "birth_date": birth_date, "gender": gender, "email": email,
        "phone": phone, "address": address, "rg": rg, "cpf": cpf,
        "sector": sector, "position": position, "clinic_id": clinic_id,
    }

    try:
        form = PatientForm(**values)
        patient_service.create_patient(db, current_user, form)
    except ValidationError as e:
        return templates.TemplateResponse(request, "dashboard/add_patient.html", {
            "user": current_user,
            "clinic_options": clinic_service.clinic_options(db) if current_user.is_admin else [],
            "gender_labels": GENDER_LABELS,
            "errors": form_errors(e),
            "values": values,
        }, status_code=400)
    except PermissionDenied as e:
        return redirect_with_toast("/dashboard/add-patient", e.message, "error")

    return redirect_with_toast("/dashboard/patients", "Paciente adicionado com sucesso!")


# ======================
# 詳細資料 / 編輯 / 停用
# ======================

@router.get("/patients/{patient_id}", response_class=HTMLResponse)
async def patient_detail(
    request: Request,
    patient_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_member),
):
    """病人詳細資料與編輯表單"""
    try:
        patient = patient_service.get_patient_for_user(db, current_user, patient_id)
    except NotFound as e:
        return redirect_with_toast("/dashboard/patients", e.message, "error")

    return templates.TemplateResponse(request, "dashboard/patient_detail.html", {
        "user": current_user,
        "patient": patient,
        "exams": exam_service.get_exams_by_patient(db, patient.id),
        "exam_status": exam_service.exam_status,
        "gender_labels": GENDER_LABELS,
        "errors": {},
    })


@router.post("/patients/{patient_id}", response_class=HTMLResponse)
async def update_patient(
    request: Request,
    patient_id: int,
    name: str = Form(""),
    birth_date: str = Form(""),
    gender: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    address: str = Form(""),
    rg: str = Form(""),
    cpf: str = Form(""),
    sector: str = Form(""),
    position: str = Form(""),
    exam_date: str = Form(""),
    appeared_on_exam: str = Form(""),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_member),
):
    """更新病人資料"""
    try:
        patient = patient_service.get_patient_for_user(db, current_user, patient_id)
    except NotFound as e:
        return redirect_with_toast("/dashboard/patients", e.message, "error")

    values = {
        "name": name, "birth_date": birth_date, "gender": gender, "email": email,
        "phone": phone, "address": address, "rg": rg, "cpf": cpf, "sector": sector,
        "position": position, "exam_date": exam_date, "appeared_on_exam": appeared_on_exam,
    }

    try:
        form = PatientUpdateForm(**values)
    except ValidationError as e:
        return templates.TemplateResponse(request, "dashboard/patient_detail.html", {
            "user": current_user,
            "patient": patient,
            "exams": exam_service.get_exams_by_patient(db, patient.id),
            "exam_status": exam_service.exam_status,
            "gender_labels": GENDER_LABELS,
            "errors": form_errors(e),
            "values": values,
        }, status_code=400)

    patient_service.update_patient(db, patient.id, form)
    return redirect_with_toast(f"/dashboard/patients/{patient.id}", "Paciente atualizado com sucesso!")


@router.post("/patients/{patient_id}/deactivate")
async def deactivate_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_member),
):
    """停用病人"""
    try:
        patient = patient_service.get_patient_for_user(db, current_user, patient_id)
    except NotFound as e:
        return redirect_with_toast("/dashboard/patients", e.message, "error")

    patient_service.deactivate_patient(db, patient.id)
    logger.info("🗑️ 停用病人 %s", patient.id)
    return redirect_with_toast("/dashboard/patients", "Paciente desativado.")
