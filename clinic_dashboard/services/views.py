# -*- coding: utf-8 -*-
"""
列表轉換 - 看板分月、病人篩選、檢查排序、分頁
全部是記憶體內的小陣列運算，每次請求重新計算
"""

from dataclasses import dataclass
from datetime import date
from math import ceil
from typing import Dict, Iterable, List, Optional, Sequence


MONTH_NAMES = [
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
]

# 篩選下拉選單 ("01".."12")
MONTH_OPTIONS = [{"value": f"{i + 1:02d}", "label": name} for i, name in enumerate(MONTH_NAMES)]

SORT_ORDERS = {
    "year-asc": "Ano (Crescente)",
    "year-desc": "Ano (Decrescente)",
    "month-asc": "Mês (Crescente)",
    "month-desc": "Mês (Decrescente)",
}

ALL = "all"
DEFAULT_PAGE_SIZE = 10


def semester_of(month_name: str) -> str:
    return "Primeiro Semestre" if MONTH_NAMES.index(month_name) < 6 else "Segundo Semestre"


# ===================================
# 看板
# ===================================

def group_exams_by_month(exams: Iterable, year: Optional[int] = None) -> Dict[str, List]:
    """依月份分組（固定 12 欄），可篩選年份，欄內依日期由舊到新"""
    months: Dict[str, List] = {name: [] for name in MONTH_NAMES}

    for exam in exams:
        if not exam.exam_date:
            continue
        if year is not None and exam.exam_date.year != year:
            continue
        months[MONTH_NAMES[exam.exam_date.month - 1]].append(exam)

    for bucket in months.values():
        bucket.sort(key=lambda e: e.exam_date)

    return months


def available_years(exams: Iterable) -> List[int]:
    """檢查資料中出現的年份（新到舊）"""
    return sorted({e.exam_date.year for e in exams if e.exam_date}, reverse=True)


FILTER_YEAR_SPAN = 20


def filter_year_options(exams: Iterable, today: Optional[date] = None) -> List[int]:
    """表格年份下拉：今年起往後 20 年，再補上資料中較早的年份（舊到新）"""
    current = (today or date.today()).year
    years = set(range(current, current + FILTER_YEAR_SPAN + 1))
    years.update(available_years(exams))
    return sorted(years)


# ===================================
# 病人篩選
# ===================================

@dataclass
class PatientFilter:
    """病人列表篩選條件（值皆為字串，"all" 表示不篩）"""
    has_exam: str = ALL     # yes / no / all
    month: str = ALL        # "01".."12"
    year: str = ALL
    clinic_id: str = ALL
    sort_order: str = "year-asc"

    @property
    def is_default(self) -> bool:
        return self == PatientFilter()


def _exam_matches_date(exam, month: str, year: str) -> bool:
    if not exam.exam_date:
        return False
    if month != ALL and f"{exam.exam_date.month:02d}" != month:
        return False
    if year != ALL and str(exam.exam_date.year) != year:
        return False
    return True


def patient_passes(patient, exams: Sequence, flt: PatientFilter, role: str) -> bool:
    """單一病人是否通過篩選"""
    if flt.has_exam != ALL:
        has_exams = len(exams) > 0
        if flt.has_exam == "yes" and not has_exams:
            return False
        if flt.has_exam == "no" and has_exams:
            return False

    # 日期條件只約束有檢查的病人：任一筆檢查同時符合月與年即可
    if (flt.month != ALL or flt.year != ALL) and exams:
        if not any(_exam_matches_date(e, flt.month, flt.year) for e in exams):
            return False

    if role == "admin" and flt.clinic_id != ALL:
        if str(patient.clinic_id) != str(flt.clinic_id):
            return False

    return True


def filter_patients(patients: Iterable, flt: PatientFilter, role: str, exams_by_patient: Dict[int, Sequence] = None) -> List:
    """沒有傳 exams_by_patient 時使用 patient.exams"""
    if exams_by_patient is None:
        return [p for p in patients if patient_passes(p, list(p.exams), flt, role)]
    return [
        p for p in patients
        if patient_passes(p, exams_by_patient.get(p.id, []), flt, role)
    ]


def search_by_name(patients: Iterable, text: str) -> List:
    """表格上方的姓名搜尋框"""
    text = (text or "").strip().lower()
    if not text:
        return list(patients)
    return [p for p in patients if text in (p.name or "").lower()]


# ===================================
# 檢查排序
# ===================================

def sort_exams(exams: Iterable, order: str = "year-asc") -> List:
    """
    依年/月排序展開列中的檢查
    year-*: 先年後月；month-*: 先月後年；沒有日期的排最後
    """
    dated = [e for e in exams if e.exam_date]
    undated = [e for e in exams if not e.exam_date]

    if order.startswith("month"):
        key = lambda e: (e.exam_date.month, e.exam_date.year)  # noqa: E731
    elif order.startswith("year"):
        key = lambda e: (e.exam_date.year, e.exam_date.month)  # noqa: E731
    else:
        return dated + undated

    dated.sort(key=key, reverse=order.endswith("desc"))
    return dated + undated


# ===================================
# 分頁
# ===================================

@dataclass
class Page:
    items: list
    page: int
    page_size: int
    total: int

    @property
    def pages(self) -> int:
        return max(1, ceil(self.total / self.page_size))

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages


def paginate(items: Sequence, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page:
    total = len(items)
    pages = max(1, ceil(total / page_size))
    page = min(max(1, page), pages)
    start = (page - 1) * page_size
    return Page(items=list(items[start:start + page_size]), page=page, page_size=page_size, total=total)
