# -*- coding: utf-8 -*-
"""
檢查服務 - 查詢、新增、狀態判斷
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from ..exceptions import NotFound
from ..models.exam import Exam
from ..models.patient import Patient
from ..models.user import User
from ..schemas.forms import ExamForm

logger = logging.getLogger(__name__)


# 看板卡片狀態
STATUS_DONE = {"label": "Concluído", "variant": "success"}
STATUS_PENDING = {"label": "Pendente", "variant": "warning"}
STATUS_SCHEDULED = {"label": "Agendado", "variant": "outline"}


def get_exams_by_patient(db: Session, patient_id: int) -> List[Exam]:
    """某病人的所有檢查（新到舊）"""
    return db.query(Exam).filter(
        Exam.patient_id == patient_id
    ).order_by(Exam.exam_date.desc()).all()


def get_exam(db: Session, exam_id: int) -> Optional[Exam]:
    return db.query(Exam).filter(Exam.id == exam_id).first()


def create_exam(db: Session, patient_id: int, form: ExamForm) -> Exam:
    """新增檢查"""
    if not db.query(Patient.id).filter(Patient.id == patient_id).first():
        raise NotFound("Paciente não encontrado")

    exam = Exam(
        patient_id=patient_id,
        exam_type=form.exam_type,
        exam_date=form.exam_date,
        result=form.result,
        notes=form.notes,
        appeared_on_exam=form.appeared_on_exam,
    )
    db.add(exam)
    db.commit()
    db.refresh(exam)
    logger.info("🩺 新檢查 %s (patient=%s)", exam.id, patient_id)
    return exam


def list_exams_for_user(db: Session, user: User) -> List[Exam]:
    """
    依角色取得檢查（新到舊）
    - 管理員：全部
    - 診所帳號：先取自己診所的病人，再取這些病人的檢查
    """
    if user.is_admin:
        return db.query(Exam).options(
            joinedload(Exam.patient)
        ).order_by(Exam.exam_date.desc()).all()

    if not (user.is_clinic and user.clinic_id):
        return []

    patient_ids = [
        pid for (pid,) in db.query(Patient.id).filter(Patient.clinic_id == user.clinic_id).all()
    ]
    if not patient_ids:
        return []

    return db.query(Exam).options(
        joinedload(Exam.patient)
    ).filter(
        Exam.patient_id.in_(patient_ids)
    ).order_by(Exam.exam_date.desc()).all()


def exam_status(exam: Exam, today: date = None) -> Dict[str, str]:
    """有結果 → 完成；日期已過 → 待處理；否則 → 已排程"""
    if today is None:
        today = date.today()

    if exam.result:
        return STATUS_DONE
    if exam.exam_date and exam.exam_date < today:
        return STATUS_PENDING
    return STATUS_SCHEDULED
