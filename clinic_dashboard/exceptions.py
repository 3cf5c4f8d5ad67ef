# -*- coding: utf-8 -*-
"""
領域例外 - 由路由捕捉後以 toast 顯示
"""


class DashboardError(Exception):
    """所有可顯示給使用者的錯誤"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(DashboardError):
    """登入 / 註冊 / 密碼重設失敗"""


class PermissionDenied(DashboardError):
    """角色不允許此操作"""


class NotFound(DashboardError):
    """找不到資料（或不可見）"""


class ClinicCreationError(DashboardError):
    """建立診所流程在某一步失敗（先前步驟不回滾）"""

    def __init__(self, step: str, message: str):
        super().__init__(message)
        self.step = step

    def __str__(self):
        return f"[{self.step}] {self.message}"
