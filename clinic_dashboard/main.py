# -*- coding: utf-8 -*-
"""
診所管理儀表板 - FastAPI 入口
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .database import init_db
from .exceptions import DashboardError
from .logging_setup import setup_logging
from .routers import auth, home, clinics, patients, exams
from .templating import templates, redirect_with_toast

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """應用程式生命週期"""
    logger.info("🚀 %s %s 啟動中...", settings.APP_NAME, settings.APP_VERSION)
    init_db()
    yield
    logger.info("👋 應用程式關閉")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)


def _is_api(request: Request) -> bool:
    return request.url.path.startswith("/api/") or "application/json" in request.headers.get("accept", "")


@app.exception_handler(StarletteHTTPException)
async def custom_http_exception_handler(request: Request, exc: StarletteHTTPException):
    if _is_api(request):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    if exc.status_code == 401:
        return RedirectResponse(url=f"/auth/login?next={quote(request.url.path)}", status_code=302)

    if exc.status_code == 403:
        return redirect_with_toast("/dashboard", str(exc.detail), "error")

    titles = {404: "Página não encontrada", 500: "Erro do sistema"}
    msgs = {404: "A página que você procura não existe ou foi removida", 500: "Ocorreu um erro, tente novamente mais tarde"}
    return templates.TemplateResponse(request, "error.html", {
        "error_code": exc.status_code,
        "error_title": titles.get(exc.status_code, "Ocorreu um erro"),
        "error_message": msgs.get(exc.status_code, str(exc.detail) if exc.detail else "Tente novamente mais tarde"),
    }, status_code=exc.status_code)


@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError):
    """路由沒有處理到的領域錯誤"""
    logger.warning("領域錯誤 %s: %s", request.url.path, exc)
    if _is_api(request):
        return JSONResponse(status_code=400, content={"detail": exc.message})
    return redirect_with_toast("/dashboard", exc.message, "error")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("❌ 未預期錯誤：%s", exc)
    if request.url.path.startswith("/api/"):
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return templates.TemplateResponse(request, "error.html", {
        "error_code": 500,
        "error_title": "Erro do sistema",
        "error_message": "Ocorreu um erro inesperado, tente novamente mais tarde",
    }, status_code=500)


static_dir = Path(__file__).parent / "static"
if static_dir.exists():
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


app.include_router(home.router)
app.include_router(auth.router)
app.include_router(clinics.router)
app.include_router(patients.router)
app.include_router(exams.router)
