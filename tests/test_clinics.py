# -*- coding: utf-8 -*-
import pytest
from sqlalchemy.exc import SQLAlchemyError

from clinic_dashboard.exceptions import ClinicCreationError
from clinic_dashboard.models import Clinic, User
from clinic_dashboard.schemas import ClinicForm
from clinic_dashboard.services import auth as auth_service
from clinic_dashboard.services import clinics as clinic_service


def clinic_form(**overrides):
    data = {
        "name": "Clinica Leste",
        "email": "leste@example.com",
        "password": "12345678",
        "cnpj": "12.345.678/0001-90",
    }
    data.update(overrides)
    return ClinicForm(**data)


def test_create_clinic_account_links_user(db, monkeypatch):
    monkeypatch.setattr(auth_service.mailer, "send_email", lambda to, subject, body: {"success": True})

    clinic = clinic_service.create_clinic_account(db, clinic_form(), "http://testserver/")

    user = db.query(User).filter(User.email == "leste@example.com").one()
    assert user.role == "clinic"
    assert user.clinic_id == clinic.id
    assert clinic.user_id == user.id
    assert clinic.cnpj == "12.345.678/0001-90"


def test_email_failure_does_not_abort(db, monkeypatch):
    monkeypatch.setattr(
        auth_service.mailer, "send_email",
        lambda to, subject, body: {"success": False, "error": "smtp down"},
    )

    clinic = clinic_service.create_clinic_account(db, clinic_form())
    assert clinic.id


def test_duplicate_email_fails_at_signup(db, clinic_user):
    with pytest.raises(ClinicCreationError) as exc:
        clinic_service.create_clinic_account(db, clinic_form(email=clinic_user.email))

    assert exc.value.step == "signup"
    assert db.query(Clinic).filter(Clinic.name == "Clinica Leste").count() == 0


def test_failed_clinic_step_keeps_created_user(db, monkeypatch):
    def broken_clinic(**kwargs):
        raise SQLAlchemyError("insert failed")

    monkeypatch.setattr(clinic_service, "Clinic", broken_clinic)

    with pytest.raises(ClinicCreationError) as exc:
        clinic_service.create_clinic_account(db, clinic_form())

    assert exc.value.step == "clinic"
    user = db.query(User).filter(User.email == "leste@example.com").one()
    assert user.clinic_id is None


def test_list_clinics_orders_by_name(db, clinic, other_clinic):
    inactive = Clinic(name="Aaa Fechada", active=False)
    db.add(inactive)
    db.commit()

    assert [c.name for c in clinic_service.list_clinics(db)] == ["Clinica Norte", "Clinica Sul"]
    assert clinic_service.list_clinics(db, active_only=False)[0].name == "Aaa Fechada"


def test_update_clinic_ignores_unknown_fields(db, clinic):
    updated = clinic_service.update_clinic(db, clinic.id, phone="1199999", user_id=99)
    assert updated.phone == "1199999"
    assert updated.user_id is None


def test_failed_link_step_keeps_clinic(db, monkeypatch):
    real_commit = db.commit
    calls = []

    def commit_until_link():
        calls.append(1)
        # 註冊、建立診所之後的第三次 commit 是回填 clinic_id
        if len(calls) == 3:
            raise SQLAlchemyError("update failed")
        real_commit()

    monkeypatch.setattr(db, "commit", commit_until_link)

    with pytest.raises(ClinicCreationError) as exc:
        clinic_service.create_clinic_account(db, clinic_form())

    assert exc.value.step == "link"
    clinic = db.query(Clinic).filter(Clinic.name == "Clinica Leste").one()
    user = db.query(User).filter(User.email == "leste@example.com").one()
    assert clinic.user_id == user.id
    assert user.clinic_id is None
