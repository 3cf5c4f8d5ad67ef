# -*- coding: utf-8 -*-
"""
檢查紀錄模型
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Text, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base


# 檢查類型（入職 / 離職 / 定期）
EXAM_TYPES = ["Admissional", "Demissional", "Periódico"]


class Exam(Base):
    """檢查紀錄"""
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    exam_type = Column(String(50), nullable=False)
    exam_date = Column(Date, nullable=True, index=True)
    result = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    appeared_on_exam = Column(Boolean, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    patient = relationship("Patient", back_populates="exams")

    def __repr__(self):
        return f"<Exam {self.id}: {self.exam_type} @ {self.exam_date}>"

    @property
    def patient_name(self) -> str:
        return self.patient.name if self.patient else "Unknown"
