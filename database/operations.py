"""数据库 CRUD 操作

提供上传记录和键值存储的读写功能。
"""
from datetime import datetime
from typing import Optional
from models import UploadedFile
from .connection import get_db_connection


# ============================================================
# Upload 操作
# ============================================================

def create_upload(
    original_name: str,
    assigned_name: str,
    mime_type: str,
    file_size: int,
    file_path: str,
    target_version: Optional[str] = None
) -> int:
    """创建上传记录

    Args:
        original_name: 原始文件名
        assigned_name: 分配的唯一文件名
        mime_type: MIME 类型
        file_size: 文件大小（字节）
        file_path: 存储路径
        target_version: 目标版本（可选）

    Returns:
        upload_id: 创建的记录 ID
    """
    conn = get_db_connection()
    cursor = conn.cursor()

    cursor.execute("""
        INSERT INTO uploads (
            original_name, assigned_name, mime_type, file_size, file_path, target_version
        ) VALUES (?, ?, ?, ?, ?, ?)
    """, (original_name, assigned_name, mime_type, file_size, file_path, target_version))

    upload_id = cursor.lastrowid
    conn.commit()
    conn.close()

    return upload_id


def get_upload_by_assigned_name(assigned_name: str) -> Optional[UploadedFile]:
    """根据分配的文件名查询上传记录"""
    conn = get_db_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT * FROM uploads WHERE assigned_name = ?", (assigned_name,))
    row = cursor.fetchone()
    conn.close()

    if not row:
        return None

    return _row_to_upload(row)


def get_recent_uploads(limit: int = 50) -> list[UploadedFile]:
    """查询最近的上传记录"""
    conn = get_db_connection()
    cursor = conn.cursor()

    cursor.execute("""
        SELECT * FROM uploads
        ORDER BY uploaded_at DESC, id DESC
        LIMIT ?
    """, (limit,))

    rows = cursor.fetchall()
    conn.close()

    return [_row_to_upload(row) for row in rows]


def _row_to_upload(row) -> UploadedFile:
    return UploadedFile(
        id=row["id"],
        original_name=row["original_name"],
        assigned_name=row["assigned_name"],
        mime_type=row["mime_type"],
        file_size=row["file_size"],
        file_path=row["file_path"],
        target_version=row["target_version"],
        uploaded_at=datetime.fromisoformat(row["uploaded_at"]) if row["uploaded_at"] else None
    )


# ============================================================
# 键值存储操作
# ============================================================

def kv_get(key: str, db_path: Optional[str] = None) -> Optional[str]:
    """读取键值，不存在返回 None"""
    conn = get_db_connection(db_path)
    cursor = conn.cursor()

    cursor.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
    row = cursor.fetchone()
    conn.close()

    return row["value"] if row else None


def kv_set(key: str, value: str, db_path: Optional[str] = None):
    """写入键值（覆盖）"""
    conn = get_db_connection(db_path)
    cursor = conn.cursor()

    cursor.execute("""
        INSERT INTO kv_store (key, value) VALUES (?, ?)
        ON CONFLICT(key) DO UPDATE SET value = excluded.value
    """, (key, value))

    conn.commit()
    conn.close()
