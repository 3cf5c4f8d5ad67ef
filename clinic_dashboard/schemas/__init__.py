# -*- coding: utf-8 -*-
"""
表單驗證模型
"""

from .forms import (
    ClinicForm,
    PatientForm,
    PatientUpdateForm,
    ExamForm,
    SignupForm,
    LoginForm,
    PasswordResetForm,
    form_errors,
)
