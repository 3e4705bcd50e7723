"""数据库操作"""
from .connection import get_db_connection, init_database
from .operations import (
    # Upload 操作
    create_upload,
    get_upload_by_assigned_name,
    get_recent_uploads,

    # 键值存储
    kv_get,
    kv_set,
)

__all__ = [
    "get_db_connection",
    "init_database",
    # Upload
    "create_upload",
    "get_upload_by_assigned_name",
    "get_recent_uploads",
    # KV
    "kv_get",
    "kv_set",
]
