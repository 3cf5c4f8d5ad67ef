# -*- coding: utf-8 -*-
"""
統計服務 - 儀表板卡片與圖表資料
所有查詢依角色限制範圍：診所帳號只看自己診所
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.clinic import Clinic
from ..models.exam import Exam
from ..models.patient import Patient
from ..models.user import User
from .patients import scope_to_user

logger = logging.getLogger(__name__)


ATTENDANCE_LABELS = {
    True: "Compareceu",
    False: "Não Compareceu",
    None: "Não Informado",
}


def chart_title(base: str, user: User) -> str:
    """診所帳號的標題加上「da Clínica」"""
    if user.is_admin:
        return base
    return f"{base} da Clínica"


def _scoped_exams(db: Session, user: User, *columns):
    """依角色限制的檢查查詢（join 病人以取得診所）"""
    query = db.query(*columns).join(Patient, Patient.id == Exam.patient_id)
    return scope_to_user(query, user)


# ===================================
# 卡片
# ===================================

def get_section_cards(db: Session, user: User) -> List[Dict]:
    """
    儀表板上方卡片
    - 管理員：病人總數、診所數、平均每診所病人數
    - 診所帳號：自己診所的病人數
    """
    if user.is_admin:
        total_patients = db.query(func.count(Patient.id)).scalar() or 0
        total_clinics = db.query(func.count(Clinic.id)).scalar() or 0
        average = round(total_patients / total_clinics) if total_clinics else 0

        return [
            {
                "title": "Total de Pacientes",
                "value": total_patients,
                "description": "Pacientes cadastrados em todas as clínicas",
            },
            {
                "title": "Clínicas",
                "value": total_clinics,
                "description": "Clínicas cadastradas",
            },
            {
                "title": "Média de Pacientes por Clínica",
                "value": average,
                "description": "Pacientes por clínica",
            },
        ]

    patients = scope_to_user(db.query(func.count(Patient.id)), user).scalar() or 0
    return [
        {
            "title": "Pacientes da Clínica",
            "value": patients,
            "description": "Pacientes cadastrados na sua clínica",
        },
    ]


# ===================================
# 圖表
# ===================================

def exam_years(db: Session, user: User) -> List[int]:
    """可選年份：資料中的年份 + 今年 + 明年（由小到大）"""
    today = date.today()
    years = {today.year, today.year + 1}
    for (exam_date,) in _scoped_exams(db, user, Exam.exam_date).filter(Exam.exam_date.isnot(None)).all():
        years.add(exam_date.year)
    return sorted(years)


def get_monthly_exam_chart(db: Session, user: User, year: Optional[int] = None) -> Dict:
    """選定年份每月檢查數（12 個 YYYY-MM 點）"""
    years = exam_years(db, user)
    if year not in years:
        year = date.today().year

    counts = {month: 0 for month in range(1, 13)}
    rows = _scoped_exams(db, user, Exam.exam_date).filter(
        Exam.exam_date >= date(year, 1, 1),
        Exam.exam_date <= date(year, 12, 31),
    ).all()
    for (exam_date,) in rows:
        counts[exam_date.month] += 1

    return {
        "title": chart_title("Exames por Mês", user),
        "year": year,
        "years": years,
        "data": [
            {"month": f"{year}-{month:02d}", "exams": count}
            for month, count in counts.items()
        ],
        "total": sum(counts.values()),
    }


def get_exam_type_chart(db: Session, user: User) -> Dict:
    """各檢查類型數量（多到少）"""
    rows = _scoped_exams(db, user, Exam.exam_type, func.count(Exam.id)).group_by(Exam.exam_type).all()
    data = sorted(
        ({"type": exam_type or "Não informado", "count": count} for exam_type, count in rows),
        key=lambda item: item["count"],
        reverse=True,
    )

    return {
        "title": chart_title("Tipos de Exame", user),
        "data": data,
        "total": sum(item["count"] for item in data),
    }


def get_attendance_chart(db: Session, user: User) -> Dict:
    """檢查出席統計，數量為 0 的分類不顯示"""
    counts = {label: 0 for label in ATTENDANCE_LABELS.values()}
    rows = _scoped_exams(db, user, Exam.appeared_on_exam, func.count(Exam.id)).group_by(Exam.appeared_on_exam).all()
    for appeared, count in rows:
        counts[ATTENDANCE_LABELS[appeared]] += count

    data = [{"status": label, "count": count} for label, count in counts.items() if count > 0]

    return {
        "title": chart_title("Comparecimento aos Exames", user),
        "data": data,
        "total": sum(item["count"] for item in data),
    }
