# -*- coding: utf-8 -*-
"""
診所管理儀表板
"""

__version__ = "1.0.0"
