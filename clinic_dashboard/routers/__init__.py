# -*- coding: utf-8 -*-
"""
路由模組
"""

from . import auth
from . import home
from . import clinics
from . import patients
from . import exams
