# -*- coding: utf-8 -*-
"""
表單驗證 - 每個頁面表單對應一個 pydantic 模型
驗證失敗時以 form_errors() 轉成 {欄位: 訊息} 顯示在欄位下方
"""

from datetime import date
from typing import ClassVar, Dict, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

from ..models.exam import EXAM_TYPES


MIN_PASSWORD_LENGTH = 8
MIN_BIRTH_DATE = date(1900, 1, 1)

INVALID_EMAIL = "Por favor, insira um endereço de e-mail válido."
SHORT_PASSWORD = "A senha deve ter pelo menos 8 caracteres."
PASSWORDS_DONT_MATCH = "Passwords do not match"


def _check_email(value: str) -> str:
    try:
        return validate_email(value, check_deliverability=False).normalized
    except EmailNotValidError:
        raise PydanticCustomError("email", INVALID_EMAIL)


def _check_password(value: str) -> str:
    if len(value or "") < MIN_PASSWORD_LENGTH:
        raise PydanticCustomError("password", SHORT_PASSWORD)
    return value


class FormModel(BaseModel):
    """HTML 表單共用：去除空白，空字串視為未填"""

    # 必填欄位保留空字串，讓長度檢查給出正確訊息
    required_text: ClassVar[tuple] = ()

    @model_validator(mode="before")
    @classmethod
    def blank_to_none(cls, data):
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            if isinstance(value, str):
                value = value.strip()
                if value == "" and key not in cls.required_text:
                    value = None
            cleaned[key] = value
        return cleaned


class ClinicForm(FormModel):
    """新增診所（同時建立診所帳號）"""
    required_text: ClassVar[tuple] = ("name", "email", "password")

    name: str
    email: str
    password: str
    address: Optional[str] = None
    phone: Optional[str] = None
    cnpj: Optional[str] = None
    social_reason: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_min_length(cls, v: str) -> str:
        if len(v) < 2:
            raise PydanticCustomError("name", "O nome da clínica deve ter pelo menos 2 caracteres.")
        return v

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _check_password(v)


class PatientForm(FormModel):
    """新增病人"""
    required_text: ClassVar[tuple] = ("name",)

    name: str
    birth_date: Optional[date] = None
    gender: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    clinic_id: Optional[int] = None
    rg: Optional[str] = None
    cpf: Optional[str] = None
    sector: Optional[str] = None
    position: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_min_length(cls, v: str) -> str:
        if len(v) < 2:
            raise PydanticCustomError("name", "O nome do paciente deve ter pelo menos 2 caracteres.")
        return v

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v) if v else None

    @field_validator("gender")
    @classmethod
    def gender_known(cls, v: Optional[str]) -> Optional[str]:
        if v and v not in ("male", "female", "other"):
            raise PydanticCustomError("gender", "Selecione um gênero válido.")
        return v

    @field_validator("birth_date")
    @classmethod
    def birth_date_range(cls, v: Optional[date]) -> Optional[date]:
        if v and (v > date.today() or v < MIN_BIRTH_DATE):
            raise PydanticCustomError("birth_date", "Data de nascimento inválida.")
        return v


class PatientUpdateForm(PatientForm):
    """編輯病人（多了檢查日與出席）"""
    exam_date: Optional[date] = None
    appeared_on_exam: Optional[bool] = None


class ExamForm(FormModel):
    """新增檢查"""

    model_config = ConfigDict(validate_default=True)

    exam_type: Optional[str] = None
    exam_date: Optional[date] = None
    result: Optional[str] = None
    notes: Optional[str] = None
    appeared_on_exam: bool = False

    @field_validator("exam_type")
    @classmethod
    def exam_type_required(cls, v: Optional[str]) -> str:
        if not v:
            raise PydanticCustomError("exam_type", "Tipo de exame é obrigatório")
        if v not in EXAM_TYPES:
            raise PydanticCustomError("exam_type", "Tipo de exame inválido")
        return v

    @field_validator("exam_date")
    @classmethod
    def exam_date_required(cls, v: Optional[date]) -> date:
        if v is None:
            raise PydanticCustomError("exam_date", "Data do exame é obrigatória")
        return v

    @field_validator("appeared_on_exam", mode="before")
    @classmethod
    def checkbox(cls, v):
        # 未勾選的 checkbox 不會送出
        return False if v is None else v


class SignupForm(FormModel):
    """公開註冊"""
    required_text: ClassVar[tuple] = ("name", "email", "password", "confirm_password")

    name: str
    email: str
    password: str
    confirm_password: str

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise PydanticCustomError("confirm_password", PASSWORDS_DONT_MATCH)
        return self


class LoginForm(FormModel):
    required_text: ClassVar[tuple] = ("email", "password")

    email: str
    password: str

    @field_validator("email", "password")
    @classmethod
    def required(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("required", "Campo obrigatório")
        return v


class PasswordResetForm(FormModel):
    required_text: ClassVar[tuple] = ("password", "confirm_password")

    password: str
    confirm_password: str

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise PydanticCustomError("confirm_password", PASSWORDS_DONT_MATCH)
        return self


def form_errors(exc: ValidationError) -> Dict[str, str]:
    """ValidationError → {欄位: 第一個訊息}；整體錯誤放在 "__all__" """
    errors: Dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        field = str(loc[0]) if loc else "__all__"
        if field == "__all__" and err.get("type") in ("confirm_password",):
            field = "confirm_password"
        errors.setdefault(field, err["msg"])
    return errors
