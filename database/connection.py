"""数据库连接管理

使用 SQLite 作为数据库，提供连接管理和表初始化功能。
Gateway 用它记录上传文件，客户端用它保存计数器和文件名映射。
"""
import logging
import sqlite3
import os
from pathlib import Path


logger = logging.getLogger(__name__)


def get_db_path() -> str:
    """获取数据库文件路径

    从环境变量读取，默认为 .data/modupdater.db
    """
    return os.getenv("DB_PATH", ".data/modupdater.db")


def get_db_connection(db_path: str | None = None) -> sqlite3.Connection:
    """获取数据库连接

    自动创建数据库文件和父目录（如果不存在）
    """
    db_path = db_path or get_db_path()

    # 确保父目录存在
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.Connection(db_path)
    conn.row_factory = sqlite3.Row  # 支持按列名访问
    return conn


def init_database(db_path: str | None = None):
    """初始化数据库表结构

    创建 uploads 和 kv_store 两张表
    """
    conn = get_db_connection(db_path)
    cursor = conn.cursor()

    # 上传记录
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS uploads (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            original_name TEXT NOT NULL,
            assigned_name TEXT NOT NULL UNIQUE,
            mime_type TEXT NOT NULL,
            file_size INTEGER NOT NULL,
            file_path TEXT NOT NULL,
            target_version TEXT,
            uploaded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_uploaded_at
        ON uploads(uploaded_at)
    """)

    # 客户端本地键值存储（modCounter / modMappings）
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
    """)

    conn.commit()
    conn.close()

    logger.info("数据库初始化完成: %s", db_path or get_db_path())


if __name__ == "__main__":
    # 直接运行此文件可初始化数据库
    logging.basicConfig(level=logging.INFO)
    init_database()
