# -*- coding: utf-8 -*-
"""
服務層模組
"""
from . import auth
from . import mailer
from . import clinics
from . import patients
from . import exams
from . import views
from . import stats
