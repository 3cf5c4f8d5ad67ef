# -*- coding: utf-8 -*-
"""
診所模型
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from ..database import Base


class Clinic(Base):
    """診所（租戶）"""
    __tablename__ = "clinics"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    address = Column(String(255), nullable=True)
    cnpj = Column(String(20), nullable=True)
    social_reason = Column(String(200), nullable=True)  # razão social

    user_id = Column(Integer, nullable=True)  # 建立時一併開的診所帳號
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    patients = relationship("Patient", back_populates="clinic")

    def __repr__(self):
        return f"<Clinic {self.id}: {self.name}>"
