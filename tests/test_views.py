# -*- coding: utf-8 -*-
from datetime import date
from types import SimpleNamespace

from clinic_dashboard.services.views import (
    MONTH_NAMES,
    PatientFilter,
    available_years,
    filter_patients,
    filter_year_options,
    group_exams_by_month,
    paginate,
    search_by_name,
    semester_of,
    sort_exams,
)


def exam(exam_date, patient_id=1):
    return SimpleNamespace(exam_date=exam_date, patient_id=patient_id)


def patient(pid, clinic_id=1, name="Paciente"):
    return SimpleNamespace(id=pid, clinic_id=clinic_id, name=name)


# ===== 看板 =====

def test_group_exams_by_month_has_twelve_buckets():
    months = group_exams_by_month([])
    assert list(months) == MONTH_NAMES
    assert all(items == [] for items in months.values())


def test_group_exams_by_month_filters_year_and_sorts_ascending():
    late = exam(date(2024, 3, 20))
    early = exam(date(2024, 3, 2))
    other_year = exam(date(2023, 3, 10))
    undated = exam(None)

    months = group_exams_by_month([late, other_year, early, undated], 2024)
    assert months["Março"] == [early, late]

    all_years = group_exams_by_month([late, other_year, early], None)
    assert all_years["Março"] == [other_year, early, late]


def test_available_years_unique_newest_first():
    exams = [exam(date(2022, 1, 1)), exam(date(2024, 5, 1)), exam(date(2022, 7, 1)), exam(None)]
    assert available_years(exams) == [2024, 2022]


def test_filter_year_options_cover_next_twenty_years_and_past_data():
    exams = [exam(date(2019, 3, 1)), exam(date(2026, 1, 1))]
    years = filter_year_options(exams, today=date(2026, 10, 19))

    assert years[0] == 2019
    assert years[1:] == list(range(2026, 2047))
    assert filter_year_options([], today=date(2026, 10, 19)) == list(range(2026, 2047))


def test_semesters():
    assert semester_of("Janeiro") == "Primeiro Semestre"
    assert semester_of("Junho") == "Primeiro Semestre"
    assert semester_of("Julho") == "Segundo Semestre"


# ===== 篩選 =====

def test_filter_has_exam():
    with_exam, without_exam = patient(1), patient(2)
    exams = {1: [exam(date(2024, 1, 5), 1)], 2: []}
    people = [with_exam, without_exam]

    assert filter_patients(people, PatientFilter(has_exam="yes"), "admin", exams) == [with_exam]
    assert filter_patients(people, PatientFilter(has_exam="no"), "admin", exams) == [without_exam]
    assert filter_patients(people, PatientFilter(), "admin", exams) == people


def test_date_filter_only_applies_to_patients_with_exams():
    march, june, none = patient(1), patient(2), patient(3)
    exams = {
        1: [exam(date(2024, 3, 1), 1), exam(date(2023, 9, 1), 1)],
        2: [exam(date(2024, 6, 1), 2)],
        3: [],
    }
    result = filter_patients([march, june, none], PatientFilter(month="03", year="2024"), "admin", exams)
    assert result == [march, none]


def test_date_filter_needs_one_exam_matching_month_and_year():
    p = patient(1)
    exams = {1: [exam(date(2024, 9, 1), 1), exam(date(2023, 3, 1), 1)]}
    assert filter_patients([p], PatientFilter(month="03", year="2024"), "admin", exams) == []


def test_clinic_filter_only_for_admin():
    a, b = patient(1, clinic_id=1), patient(2, clinic_id=2)
    flt = PatientFilter(clinic_id="2")
    assert filter_patients([a, b], flt, "admin", {}) == [b]
    assert filter_patients([a, b], flt, "clinic", {}) == [a, b]


def test_filter_uses_patient_exams_without_mapping():
    p = SimpleNamespace(id=1, clinic_id=1, name="Ana", exams=[])
    assert filter_patients([p], PatientFilter(has_exam="no"), "clinic") == [p]


def test_search_by_name_case_insensitive():
    ana, bruno = patient(1, name="Ana Lima"), patient(2, name="Bruno")
    assert search_by_name([ana, bruno], "  ana ") == [ana]
    assert search_by_name([ana, bruno], "") == [ana, bruno]


# ===== 排序 =====

def test_sort_exams_by_year_then_month():
    a = exam(date(2024, 2, 1))
    b = exam(date(2023, 11, 1))
    c = exam(date(2024, 1, 1))
    undated = exam(None)

    assert sort_exams([a, undated, b, c], "year-asc") == [b, c, a, undated]
    assert sort_exams([a, undated, b, c], "year-desc") == [a, c, b, undated]


def test_sort_exams_by_month_then_year():
    a = exam(date(2024, 2, 1))
    b = exam(date(2023, 2, 1))
    c = exam(date(2022, 12, 1))
    undated = exam(None)

    assert sort_exams([undated, a, b, c], "month-asc") == [b, a, c, undated]
    assert sort_exams([undated, a, b, c], "month-desc") == [c, a, b, undated]


# ===== 分頁 =====

def test_paginate():
    items = list(range(25))
    page = paginate(items, 3)
    assert page.items == [20, 21, 22, 23, 24]
    assert page.pages == 3
    assert page.has_prev and not page.has_next


def test_paginate_clamps_page():
    page = paginate(list(range(5)), 9)
    assert page.page == 1
    assert page.items == [0, 1, 2, 3, 4]
    assert paginate([], 1).pages == 1
