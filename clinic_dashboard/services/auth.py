# -*- coding: utf-8 -*-
"""
認證服務 - Email/密碼 + JWT Cookie
註冊、登入、工作階段、密碼重設、角色檢查
"""

import logging
import jwt
from datetime import datetime, timedelta
from typing import Optional, Dict
from urllib.parse import urlencode
from fastapi import Request, HTTPException, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from ..config import settings
from ..database import get_db
from ..exceptions import AuthError
from ..models.user import User, UserRole
from . import mailer

logger = logging.getLogger(__name__)


# ===================================
# JWT 設定
# ===================================

JWT_SECRET = settings.SECRET_KEY
JWT_ALGORITHM = "HS256"
COOKIE_NAME = "access_token"
RESET_PURPOSE = "reset"


def create_access_token(user_id: int) -> str:
    """建立 JWT Token"""
    payload = {
        "user_id": user_id,
        "exp": datetime.utcnow() + timedelta(days=settings.JWT_EXPIRATION_DAYS),
        "iat": datetime.utcnow(),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """解碼 JWT Token"""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


# ===================================
# 註冊 / 登入
# ===================================

def hash_password(password: str) -> str:
    return generate_password_hash(password)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == (email or "").strip().lower()).first()


def sign_up(
    db: Session,
    email: str,
    password: str,
    name: str = None,
    role: str = UserRole.CLINIC.value,
    clinic_id: int = None,
    phone: str = None,
) -> User:
    """建立使用者（email 不可重複）"""
    if role not in (UserRole.ADMIN.value, UserRole.CLINIC.value):
        raise AuthError(f"Invalid role: {role}")

    if get_user_by_email(db, email):
        logger.warning("A user with this email already exists: %s", email)
        raise AuthError("A user with this email already exists.")

    user = User(
        email=email.strip(),
        name=name or email.split("@")[0],
        password_hash=hash_password(password),
        role=role,
        clinic_id=clinic_id,
        phone=phone,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("👤 新使用者 %s (%s)", user.email, user.role)
    return user


def sign_in(db: Session, email: str, password: str) -> User:
    """Email + 密碼登入"""
    user = get_user_by_email(db, email)
    if not user or not user.is_active or not check_password_hash(user.password_hash or "", password):
        raise AuthError("Invalid login credentials")

    user.last_login_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user


def update_password(db: Session, user: User, password: str) -> User:
    """更新密碼"""
    user.password_hash = hash_password(password)
    db.commit()
    db.refresh(user)
    return user


# ===================================
# 密碼重設
# ===================================

def password_fingerprint(user: User) -> str:
    """目前密碼雜湊的尾段；密碼一改，舊的重設連結就失效"""
    return (user.password_hash or "")[-16:]


def create_reset_token(user: User) -> str:
    """建立密碼重設 Token（短效）"""
    payload = {
        "user_id": user.id,
        "purpose": RESET_PURPOSE,
        "pwd": password_fingerprint(user),
        "exp": datetime.utcnow() + timedelta(minutes=settings.RESET_TOKEN_MINUTES),
        "iat": datetime.utcnow(),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def build_reset_link(base_url: str, token: str) -> str:
    base = (settings.PUBLIC_BASE_URL or base_url or "").rstrip("/")
    return f"{base}/auth/reset-password?{urlencode({'token': token})}"


def send_password_reset(db: Session, email: str, base_url: str = "") -> Dict:
    """寄出密碼重設信（找不到使用者也回傳成功，避免洩漏帳號是否存在）"""
    user = get_user_by_email(db, email)
    if not user:
        logger.info("Password reset requested for unknown email %s", email)
        return {"success": True}

    link = build_reset_link(base_url, create_reset_token(user))
    return mailer.send_email(
        to=user.email,
        subject="Redefinição de senha",
        body=(
            f"Olá {user.name},\n\n"
            f"Use o link abaixo para definir sua senha:\n{link}\n\n"
            "Se você não solicitou, ignore este e-mail."
        ),
    )


def reset_password(db: Session, token: str, new_password: str) -> User:
    """以重設 Token 設定新密碼"""
    payload = decode_access_token(token or "")
    if not payload or payload.get("purpose") != RESET_PURPOSE:
        raise AuthError("Link de redefinição inválido ou expirado")

    user = db.query(User).filter(User.id == payload.get("user_id")).first()
    if not user or not user.is_active:
        raise AuthError("Link de redefinição inválido ou expirado")

    if payload.get("pwd") != password_fingerprint(user):
        raise AuthError("Link de redefinição inválido ou expirado")

    return update_password(db, user, new_password)


# ===================================
# 從 Cookie 取得當前用戶
# ===================================

def get_current_user(request: Request, db: Session) -> Optional[User]:
    """從 JWT Cookie 取得當前使用者"""
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return None

    payload = decode_access_token(token)
    if not payload or payload.get("purpose"):
        return None

    user_id = payload.get("user_id")
    if not user_id:
        return None

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        return None

    return user


def require_login(request: Request, db: Session = Depends(get_db)) -> User:
    """要求登入"""
    user = get_current_user(request, db)
    if not user:
        raise HTTPException(status_code=401, detail="Faça login para continuar")
    return user


# ===================================
# 角色檢查
# ===================================

def require_admin(request: Request, db: Session = Depends(get_db)) -> User:
    """要求管理員權限"""
    user = get_current_user(request, db)
    if not user:
        raise HTTPException(status_code=401, detail="Faça login para continuar")
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Você não tem permissão para acessar esta página")
    return user


def require_role(*roles: str):
    """動態角色檢查"""
    def dependency(request: Request, db: Session = Depends(get_db)) -> User:
        user = get_current_user(request, db)
        if not user:
            raise HTTPException(status_code=401, detail="Faça login para continuar")

        if user.role in roles:
            return user

        raise HTTPException(status_code=403, detail="Você não tem permissão para acessar esta página")

    return dependency
