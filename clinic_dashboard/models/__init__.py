# -*- coding: utf-8 -*-
"""
資料模型
"""

from .user import User, UserRole, ALL_ROLES
from .clinic import Clinic
from .patient import Patient, GENDER_LABELS
from .exam import Exam, EXAM_TYPES
