# -*- coding: utf-8 -*-
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["MAIL_API_URL"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinic_dashboard.database import Base, get_db
from clinic_dashboard.main import app
from clinic_dashboard.models import Clinic, Exam, Patient, User
from clinic_dashboard.services.auth import COOKIE_NAME, create_access_token, hash_password


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


def make_user(db, email, role, clinic_id=None, password="secret123"):
    user = User(
        name=email.split("@")[0],
        email=email,
        password_hash=hash_password(password),
        role=role,
        clinic_id=clinic_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_clinic(db, name):
    clinic = Clinic(name=name, email=f"{name.lower().replace(' ', '')}@example.com")
    db.add(clinic)
    db.commit()
    db.refresh(clinic)
    return clinic


def make_patient(db, clinic, name, **fields):
    patient = Patient(name=name, clinic_id=clinic.id, active=True, **fields)
    db.add(patient)
    db.commit()
    db.refresh(patient)
    return patient


def make_exam(db, patient, exam_date, exam_type="Periódico", **fields):
    exam = Exam(patient_id=patient.id, exam_type=exam_type, exam_date=exam_date, **fields)
    db.add(exam)
    db.commit()
    db.refresh(exam)
    return exam


def login(client, user):
    client.cookies.set(COOKIE_NAME, create_access_token(user.id))
    return client


@pytest.fixture()
def clinic(db):
    return make_clinic(db, "Clinica Norte")


@pytest.fixture()
def other_clinic(db):
    return make_clinic(db, "Clinica Sul")


@pytest.fixture()
def admin_user(db):
    return make_user(db, "admin@example.com", "admin")


@pytest.fixture()
def clinic_user(db, clinic):
    return make_user(db, "norte@example.com", "clinic", clinic_id=clinic.id)


@pytest.fixture()
def admin_client(client, admin_user):
    return login(client, admin_user)


@pytest.fixture()
def clinic_client(client, clinic_user):
    return login(client, clinic_user)
