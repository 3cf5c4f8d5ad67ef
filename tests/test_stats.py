# -*- coding: utf-8 -*-
from datetime import date

from clinic_dashboard.services import stats as stats_service

from conftest import make_exam, make_patient


def test_admin_section_cards(db, clinic, other_clinic, admin_user):
    make_patient(db, clinic, "Ana")
    make_patient(db, clinic, "Bruno")
    make_patient(db, other_clinic, "Carla")

    cards = stats_service.get_section_cards(db, admin_user)
    assert [c["value"] for c in cards] == [3, 2, 2]


def test_admin_section_cards_without_clinics(db, admin_user):
    assert [c["value"] for c in stats_service.get_section_cards(db, admin_user)] == [0, 0, 0]


def test_clinic_section_cards(db, clinic, other_clinic, clinic_user):
    make_patient(db, clinic, "Ana")
    make_patient(db, other_clinic, "Carla")

    cards = stats_service.get_section_cards(db, clinic_user)
    assert len(cards) == 1
    assert cards[0]["value"] == 1


def test_monthly_chart(db, clinic, clinic_user):
    year = date.today().year
    patient = make_patient(db, clinic, "Ana")
    make_exam(db, patient, date(year, 2, 10))
    make_exam(db, patient, date(year, 2, 20))
    make_exam(db, patient, date(year - 3, 7, 1))

    chart = stats_service.get_monthly_exam_chart(db, clinic_user, year)
    assert chart["year"] == year
    assert [p["month"] for p in chart["data"]][:2] == [f"{year}-01", f"{year}-02"]
    assert len(chart["data"]) == 12
    assert chart["data"][1]["exams"] == 2
    assert chart["total"] == 2
    assert chart["years"] == [year - 3, year, year + 1]
    assert chart["title"] == "Exames por Mês da Clínica"


def test_monthly_chart_falls_back_to_current_year(db, admin_user):
    chart = stats_service.get_monthly_exam_chart(db, admin_user, 1999)
    assert chart["year"] == date.today().year
    assert chart["title"] == "Exames por Mês"


def test_monthly_chart_scoped_to_clinic(db, clinic, other_clinic, clinic_user):
    year = date.today().year
    make_exam(db, make_patient(db, other_clinic, "Carla"), date(year, 5, 5))

    chart = stats_service.get_monthly_exam_chart(db, clinic_user, year)
    assert chart["total"] == 0


def test_exam_type_chart_descending(db, clinic, admin_user):
    patient = make_patient(db, clinic, "Ana")
    make_exam(db, patient, date(2024, 1, 1), exam_type="Admissional")
    make_exam(db, patient, date(2024, 2, 1), exam_type="Periódico")
    make_exam(db, patient, date(2024, 3, 1), exam_type="Periódico")

    chart = stats_service.get_exam_type_chart(db, admin_user)
    assert chart["data"] == [
        {"type": "Periódico", "count": 2},
        {"type": "Admissional", "count": 1},
    ]
    assert chart["total"] == 3


def test_attendance_chart_drops_empty(db, clinic, admin_user):
    patient = make_patient(db, clinic, "Ana")
    make_exam(db, patient, date(2024, 1, 1), appeared_on_exam=True)
    make_exam(db, patient, date(2024, 2, 1), appeared_on_exam=True)
    make_exam(db, patient, date(2024, 3, 1))

    chart = stats_service.get_attendance_chart(db, admin_user)
    assert chart["data"] == [
        {"status": "Compareceu", "count": 2},
        {"status": "Não Informado", "count": 1},
    ]
    assert chart["total"] == 3
