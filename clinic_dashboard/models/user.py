# -*- coding: utf-8 -*-
"""
使用者模型
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from ..database import Base
import enum


class UserRole(str, enum.Enum):
    """使用者角色"""
    ADMIN = "admin"     # 管理員 - 可看所有診所
    CLINIC = "clinic"   # 診所帳號 - 只能看自己診所


# 角色顯示名稱
ROLE_DISPLAY_NAMES = {
    "admin": "Administrador",
    "clinic": "Clínica",
}

ALL_ROLES = [r.value for r in UserRole]


def get_role_display_name(role: str) -> str:
    """取得角色顯示名稱"""
    return ROLE_DISPLAY_NAMES.get(role, role)


class User(Base):
    """使用者"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False, default="")
    phone = Column(String(30), nullable=True)

    role = Column(String(20), nullable=False, default=UserRole.CLINIC.value)
    # 不設 FK：建立診所的流程是先建使用者，再回填 clinic_id
    clinic_id = Column(Integer, nullable=True, index=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    last_login_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"

    @property
    def role_display_name(self) -> str:
        return get_role_display_name(self.role)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_clinic(self) -> bool:
        return self.role == UserRole.CLINIC.value

    def can_see_clinic(self, clinic_id) -> bool:
        """是否可以看某診所的資料"""
        if self.is_admin:
            return True
        return self.is_clinic and self.clinic_id is not None and self.clinic_id == clinic_id
