# -*- coding: utf-8 -*-
"""
診所服務 - 查詢與建立流程
建立流程：註冊帳號 → 建立診所 → 回填 clinic_id → 寄重設密碼信
每一步各自 commit，中途失敗就停下，不做回滾
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import AuthError, ClinicCreationError
from ..models.clinic import Clinic
from ..models.user import User, UserRole
from ..schemas.forms import ClinicForm
from . import auth as auth_service

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "email", "phone", "address", "cnpj", "social_reason", "active")

SUCCESS_MESSAGE = "Clinic added successfully! A password reset link has been sent to their email."


def list_clinics(db: Session, active_only: bool = True) -> List[Clinic]:
    """取得診所列表（依名稱排序）"""
    query = db.query(Clinic)
    if active_only:
        query = query.filter(Clinic.active == True)  # noqa: E712
    return query.order_by(Clinic.name).all()


def clinic_options(db: Session) -> List[Dict]:
    """下拉選單用 [{value, label}]"""
    return [{"value": c.id, "label": c.name} for c in list_clinics(db)]


def get_clinic(db: Session, clinic_id: int) -> Optional[Clinic]:
    return db.query(Clinic).filter(Clinic.id == clinic_id).first()


def update_clinic(db: Session, clinic_id: int, **fields) -> Optional[Clinic]:
    """更新診所欄位（只接受可編輯欄位）"""
    clinic = get_clinic(db, clinic_id)
    if not clinic:
        return None

    for key, value in fields.items():
        if key in EDITABLE_FIELDS:
            setattr(clinic, key, value)

    db.commit()
    db.refresh(clinic)
    return clinic


def create_clinic_account(db: Session, form: ClinicForm, base_url: str = "") -> Clinic:
    """
    建立診所與其登入帳號

    Raises:
        ClinicCreationError: 第一個失敗的步驟；之前已寫入的資料保留
    """
    # 1. 建立診所角色的使用者
    try:
        user = auth_service.sign_up(
            db,
            email=form.email,
            password=form.password,
            name=form.name,
            role=UserRole.CLINIC.value,
        )
    except AuthError as e:
        raise ClinicCreationError("signup", e.message)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error creating clinic user: %s", e)
        raise ClinicCreationError("signup", "Failed to create user record")

    # 2. 建立診所
    try:
        clinic = Clinic(
            user_id=user.id,
            name=form.name,
            address=form.address,
            phone=form.phone,
            email=form.email,
            cnpj=form.cnpj,
            social_reason=form.social_reason,
        )
        db.add(clinic)
        db.commit()
        db.refresh(clinic)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error creating clinic row for user %s: %s", user.id, e)
        raise ClinicCreationError("clinic", "Failed to create clinic")

    # 3. 回填使用者的 clinic_id
    try:
        db.query(User).filter(User.id == user.id).update({"clinic_id": clinic.id})
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error linking user %s to clinic %s: %s", user.id, clinic.id, e)
        raise ClinicCreationError("link", "Failed to link user to clinic")

    # 4. 寄重設密碼信（失敗不影響結果）
    result = auth_service.send_password_reset(db, form.email, base_url)
    if not result.get("success"):
        logger.error("Error sending password reset email to %s: %s", form.email, result.get("error"))

    logger.info("🏥 新診所 %s (id=%s)", clinic.name, clinic.id)
    return clinic
