# -*- coding: utf-8 -*-
"""
病人模型
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base


GENDER_LABELS = {
    "male": "Masculino",
    "female": "Feminino",
    "other": "Outro",
}


class Patient(Base):
    """病人"""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    birth_date = Column(Date, nullable=True)
    gender = Column(String(10), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    address = Column(String(255), nullable=True)

    # 員工資料
    rg = Column(String(30), nullable=True)
    cpf = Column(String(20), nullable=True)
    sector = Column(String(100), nullable=True)
    position = Column(String(100), nullable=True)

    clinic_id = Column(Integer, ForeignKey("clinics.id"), nullable=False, index=True)
    exam_date = Column(Date, nullable=True)
    appeared_on_exam = Column(Boolean, nullable=True)  # None = 未告知

    active = Column(Boolean, default=True)  # 軟刪除
    created_at = Column(DateTime, default=datetime.utcnow)

    clinic = relationship("Clinic", back_populates="patients")
    exams = relationship("Exam", back_populates="patient", order_by="Exam.exam_date.desc()")

    def __repr__(self):
        return f"<Patient {self.id}: {self.name}>"

    @property
    def gender_label(self) -> str:
        return GENDER_LABELS.get(self.gender or "", "Não especificado")

    @property
    def attendance_label(self) -> str:
        if self.appeared_on_exam is True:
            return "Compareceu ao exame"
        if self.appeared_on_exam is False:
            return "Não compareceu"
        return "Comparecimento não informado"
