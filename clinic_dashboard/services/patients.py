# -*- coding: utf-8 -*-
"""
病人服務 - 依角色過濾的查詢、新增、編輯、軟刪除
"""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import false, or_
from sqlalchemy.orm import Session

from ..exceptions import NotFound, PermissionDenied
from ..models.clinic import Clinic
from ..models.exam import Exam
from ..models.patient import Patient
from ..models.user import User
from ..schemas.forms import PatientForm, PatientUpdateForm

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10
NO_CLINIC_NAME = "Clínica não especificada"

PATIENT_FIELDS = (
    "name", "birth_date", "gender", "email", "phone", "address",
    "rg", "cpf", "sector", "position",
)


def scope_to_user(query, user: User):
    """依角色限制查詢範圍；未綁診所的診所帳號看不到任何資料"""
    if user.is_admin:
        return query
    if user.is_clinic and user.clinic_id:
        return query.filter(Patient.clinic_id == user.clinic_id)
    return query.filter(false())


def list_patients_for_user(db: Session, user: User) -> List[Patient]:
    """取得使用者可見的有效病人（依姓名排序）"""
    query = db.query(Patient).filter(Patient.active == True)  # noqa: E712
    return scope_to_user(query, user).order_by(Patient.name.asc()).all()


def query_patients(
    db: Session,
    limit: int = 20,
    offset: int = 0,
    search: str = None,
    clinic_id: int = None,
    sort_by: str = "name",
    sort_order: str = "asc",
    active_only: bool = True,
) -> Tuple[List[Patient], int]:
    """分頁查詢病人，回傳 (資料, 總數)"""
    query = db.query(Patient)

    if active_only:
        query = query.filter(Patient.active == True)  # noqa: E712

    if clinic_id:
        query = query.filter(Patient.clinic_id == clinic_id)

    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(or_(
            Patient.name.ilike(term),
            Patient.email.ilike(term),
            Patient.phone.ilike(term),
        ))

    total = query.count()

    column = Patient.exam_date if sort_by == "exam_date" else Patient.name
    query = query.order_by(column.desc() if sort_order == "desc" else column.asc())

    return query.offset(offset).limit(limit).all(), total


def get_patient(db: Session, patient_id: int) -> Optional[Patient]:
    return db.query(Patient).filter(Patient.id == patient_id).first()


def get_patient_for_user(db: Session, user: User, patient_id: int) -> Patient:
    """取得病人，並確認使用者看得到"""
    patient = get_patient(db, patient_id)
    if not patient or not user.can_see_clinic(patient.clinic_id):
        raise NotFound("Paciente não encontrado")
    return patient


def create_patient(db: Session, user: User, form: PatientForm) -> Patient:
    """新增病人：管理員需指定診所，診所帳號固定寫入自己的診所"""
    if user.is_admin:
        if not form.clinic_id:
            raise PermissionDenied("Por favor, selecione uma clínica para este paciente")
        clinic_id = form.clinic_id
    elif user.is_clinic and user.clinic_id:
        clinic_id = user.clinic_id
    else:
        raise PermissionDenied("Você não tem permissão para adicionar um paciente")

    patient = Patient(
        clinic_id=clinic_id,
        active=True,
        **{field: getattr(form, field) for field in PATIENT_FIELDS},
    )
    db.add(patient)
    db.commit()
    db.refresh(patient)
    logger.info("🧑 新病人 %s (clinic=%s)", patient.id, clinic_id)
    return patient


def update_patient(db: Session, patient_id: int, form: PatientUpdateForm) -> Patient:
    """更新病人資料（不改變所屬診所）"""
    patient = get_patient(db, patient_id)
    if not patient:
        raise NotFound("Paciente não encontrado")

    for field in PATIENT_FIELDS + ("exam_date", "appeared_on_exam"):
        setattr(patient, field, getattr(form, field))

    db.commit()
    db.refresh(patient)
    return patient


def deactivate_patient(db: Session, patient_id: int) -> Patient:
    """停用病人（軟刪除）"""
    patient = get_patient(db, patient_id)
    if not patient:
        raise NotFound("Paciente não encontrado")

    patient.active = False
    db.commit()
    db.refresh(patient)
    return patient


def search_patients_for_exam(db: Session, user: User, query: str = "") -> Optional[List[Dict]]:
    """
    新增檢查對話框的病人搜尋

    Returns:
        空字串 → 前 10 筆；少於 2 個字 → None（沿用原列表）；否則名稱模糊比對前 10 筆
    """
    query = (query or "").strip()
    if query and len(query) < SEARCH_MIN_LENGTH:
        return None

    q = db.query(Patient, Clinic.name).outerjoin(Clinic, Clinic.id == Patient.clinic_id)
    if query:
        q = q.filter(Patient.name.ilike(f"%{query}%"))
    q = scope_to_user(q, user)

    return [
        {
            "id": patient.id,
            "name": patient.name,
            "clinic_name": clinic_name or NO_CLINIC_NAME,
        }
        for patient, clinic_name in q.order_by(Patient.name).limit(SEARCH_LIMIT).all()
    ]


def attach_exams(db: Session, patients: List[Patient]) -> Dict[int, List[Exam]]:
    """另一次查詢取回這些病人的檢查，回傳 {patient_id: [exam...]}"""
    by_patient: Dict[int, List[Exam]] = {p.id: [] for p in patients}
    if not by_patient:
        return by_patient

    exams = db.query(Exam).filter(Exam.patient_id.in_(list(by_patient))).all()
    for exam in exams:
        by_patient[exam.patient_id].append(exam)
    return by_patient
