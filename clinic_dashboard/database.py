# -*- coding: utf-8 -*-
"""
資料庫連線與初始化
"""

import logging

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """取得資料庫 session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_and_add_column(conn, table_name: str, column_name: str, column_type: str, default_value=None):
    """檢查並新增欄位"""
    try:
        columns = {c["name"] for c in inspect(conn).get_columns(table_name)}

        if column_name not in columns:
            # 欄位不存在，新增它
            if default_value is not None:
                sql = f"ALTER TABLE {table_name} ADD COLUMN {column_name} {column_type} DEFAULT {default_value}"
            else:
                sql = f"ALTER TABLE {table_name} ADD COLUMN {column_name} {column_type}"

            conn.execute(text(sql))
            conn.commit()
            logger.info("✅ 已新增 %s.%s 欄位", table_name, column_name)
            return True
        return False
    except Exception as e:
        logger.warning("⚠️ 檢查 %s.%s: %s", table_name, column_name, e)
        return False


def run_migrations(bind=None):
    """執行資料庫遷移（第一版之後新增的欄位）"""
    with (bind or engine).connect() as conn:
        logger.info("🔄 檢查資料庫欄位...")

        # patients 表欄位（員工資料）
        check_and_add_column(conn, 'patients', 'rg', 'VARCHAR(30)')
        check_and_add_column(conn, 'patients', 'cpf', 'VARCHAR(20)')
        check_and_add_column(conn, 'patients', 'sector', 'VARCHAR(100)')
        check_and_add_column(conn, 'patients', 'position', 'VARCHAR(100)')

        # clinics 表欄位
        check_and_add_column(conn, 'clinics', 'cnpj', 'VARCHAR(20)')
        check_and_add_column(conn, 'clinics', 'social_reason', 'VARCHAR(200)')

        # users 表欄位
        check_and_add_column(conn, 'users', 'last_login_at', 'TIMESTAMP')

        logger.info("✅ 欄位檢查完成")


def init_db(bind=None):
    """初始化資料庫"""
    # 導入所有 models 以便建立表格
    from .models import user, clinic, patient, exam  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)

    run_migrations(bind)

    logger.info("✅ 資料庫初始化完成")
