# -*- coding: utf-8 -*-
"""
認證路由 - Email 登入/註冊/登出/重設密碼
"""

import logging

from fastapi import APIRouter, Request, Depends, Form
from fastapi.responses import RedirectResponse, HTMLResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..exceptions import AuthError
from ..schemas.forms import LoginForm, SignupForm, PasswordResetForm, form_errors
from ..services.auth import (
    COOKIE_NAME,
    create_access_token,
    get_current_user,
    reset_password,
    send_password_reset,
    sign_in,
    sign_up,
)
from ..templating import templates, redirect_with_toast

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["認證"])


def _login_response(user_id: int, next_url: str = "/dashboard") -> RedirectResponse:
    """設定 Cookie 並跳轉"""
    if not next_url.startswith("/") or next_url.startswith("//"):
        next_url = "/dashboard"
    response = RedirectResponse(url=next_url, status_code=303)
    response.set_cookie(
        key=COOKIE_NAME,
        value=create_access_token(user_id),
        httponly=True,
        max_age=60 * 60 * 24 * settings.JWT_EXPIRATION_DAYS,
        samesite="lax",
    )
    return response


# ======================
# 登入
# ======================

@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, next: str = "/dashboard", db: Session = Depends(get_db)):
    """登入頁面"""
    if get_current_user(request, db):
        return RedirectResponse(url="/dashboard", status_code=302)

    return templates.TemplateResponse(request, "auth/login.html", {
        "next": next,
        "errors": {},
        "values": {},
    })


@router.post("/login", response_class=HTMLResponse)
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form("/dashboard"),
    db: Session = Depends(get_db),
):
    """登入"""
    try:
        form = LoginForm(email=email, password=password)
        user = sign_in(db, form.email, form.password)
    except ValidationError as e:
        return templates.TemplateResponse(request, "auth/login.html", {
            "next": next,
            "errors": form_errors(e),
            "values": {"email": email},
        }, status_code=400)
    except AuthError as e:
        return templates.TemplateResponse(request, "auth/login.html", {
            "next": next,
            "errors": {"__all__": e.message},
            "values": {"email": email},
        }, status_code=400)

    logger.info("🔑 登入 %s", user.email)
    return _login_response(user.id, next)


# ======================
# 註冊
# ======================

@router.get("/signup", response_class=HTMLResponse)
async def signup_page(request: Request):
    """註冊頁面"""
    return templates.TemplateResponse(request, "auth/signup.html", {
        "errors": {},
        "values": {},
    })


@router.post("/signup", response_class=HTMLResponse)
async def signup(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    db: Session = Depends(get_db),
):
    """公開註冊（角色由 SIGNUP_ROLE 決定）"""
    values = {"name": name, "email": email}
    try:
        form = SignupForm(name=name, email=email, password=password, confirm_password=confirm_password)
        user = sign_up(db, form.email, form.password, name=form.name, role=settings.SIGNUP_ROLE)
    except ValidationError as e:
        return templates.TemplateResponse(request, "auth/signup.html", {
            "errors": form_errors(e),
            "values": values,
        }, status_code=400)
    except AuthError as e:
        return templates.TemplateResponse(request, "auth/signup.html", {
            "errors": {"__all__": e.message},
            "values": values,
        }, status_code=400)

    return _login_response(user.id)


# ======================
# 登出
# ======================

@router.get("/logout")
async def logout():
    """登出"""
    response = RedirectResponse(url="/auth/login", status_code=302)
    response.delete_cookie(COOKIE_NAME)
    return response


# ======================
# 忘記密碼 / 重設密碼
# ======================

@router.get("/forgot-password", response_class=HTMLResponse)
async def forgot_password_page(request: Request):
    return templates.TemplateResponse(request, "auth/forgot_password.html", {"errors": {}})


@router.post("/forgot-password")
async def forgot_password(
    request: Request,
    email: str = Form(""),
    db: Session = Depends(get_db),
):
    """寄出重設密碼信"""
    result = send_password_reset(db, email, str(request.base_url))
    if not result.get("success"):
        # 不論帳號是否存在都回同樣訊息
        logger.error("Error sending password reset email to %s: %s", email, result.get("error"))

    return redirect_with_toast(
        "/auth/login",
        "Se o e-mail estiver cadastrado, você receberá um link para redefinir a senha.",
    )


@router.get("/reset-password", response_class=HTMLResponse)
async def reset_password_page(request: Request, token: str = ""):
    return templates.TemplateResponse(request, "auth/reset_password.html", {
        "token": token,
        "errors": {},
    })


@router.post("/reset-password", response_class=HTMLResponse)
async def reset_password_submit(
    request: Request,
    token: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    db: Session = Depends(get_db),
):
    """設定新密碼"""
    try:
        form = PasswordResetForm(password=password, confirm_password=confirm_password)
        reset_password(db, token, form.password)
    except ValidationError as e:
        return templates.TemplateResponse(request, "auth/reset_password.html", {
            "token": token,
            "errors": form_errors(e),
        }, status_code=400)
    except AuthError as e:
        return redirect_with_toast("/auth/forgot-password", e.message, "error")

    return redirect_with_toast("/auth/login", "Senha definida com sucesso! Faça login.")
