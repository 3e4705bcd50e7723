"""上传接口

接收单个 multipart 文件，分配唯一文件名后写入上传目录。
"""
import logging
import mimetypes
import threading
import time
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

import database
from api.config import GatewayConfig


logger = logging.getLogger(__name__)
router = APIRouter()

CHUNK_SIZE = 64 * 1024

_name_lock = threading.Lock()
_last_stamp = 0


# ============================================================
# Response 模型
# ============================================================

class UploadResponse(BaseModel):
    """上传成功响应"""
    message: str
    filename: str
    originalName: str


def get_upload_dir(config: GatewayConfig) -> Path:
    """获取上传目录"""
    config.upload_dir.mkdir(parents=True, exist_ok=True)
    return config.upload_dir


def generate_assigned_name(original_name: str) -> str:
    """生成唯一文件名：mod_<毫秒时间戳><原扩展名>

    同一毫秒内的多次调用会顺延 1 毫秒，保证单进程内严格递增
    """
    global _last_stamp
    with _name_lock:
        stamp = max(int(time.time() * 1000), _last_stamp + 1)
        _last_stamp = stamp
    return f"mod_{stamp}{Path(original_name).suffix}"


def write_once(upload_dir: Path, original_name: str, content: bytes) -> Path:
    """以独占模式写入文件，不覆盖已有文件"""
    while True:
        file_path = upload_dir / generate_assigned_name(original_name)
        try:
            with open(file_path, "xb") as f:
                f.write(content)
            return file_path
        except FileExistsError:
            # 其他进程占用了这个名字，换一个
            continue


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/api/upload", response_model=UploadResponse)
async def upload_file(
    request: Request,
    file: Optional[UploadFile] = File(None),
    targetVersion: Optional[str] = Form(None),
    version: Optional[str] = Form(None),
):
    """上传单个文件

    成功返回 {message, filename, originalName}，filename 为分配的唯一文件名
    """
    config = GatewayConfig.from_env()

    # 1. 检查文件字段
    if file is None or not file.filename:
        return _error(400, "No file uploaded")

    form = await request.form()
    if len(form.getlist("file")) > 1:
        return _error(400, "Only one file may be uploaded")

    # 2. 分块读取，超过限制立即拒绝（此时还没有写入任何文件）
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > config.max_upload_bytes:
            logger.warning("文件 %s 超过大小限制 (%dMB)", file.filename, config.max_upload_size_mb)
            return _error(413, "File too large")
        chunks.append(chunk)

    if total_size == 0:
        return _error(400, "No file uploaded")

    original_name = Path(file.filename).name
    mime = file.content_type or mimetypes.guess_type(original_name)[0] or "application/octet-stream"
    target_version = targetVersion or version

    # 3. 写入存储
    try:
        file_path = write_once(get_upload_dir(config), original_name, b"".join(chunks))
        database.create_upload(
            original_name=original_name,
            assigned_name=file_path.name,
            mime_type=mime,
            file_size=total_size,
            file_path=str(file_path),
            target_version=target_version,
        )
    except Exception:
        logger.exception("Upload error: %s", original_name)
        return _error(500, "File upload failed")

    logger.info("Uploaded mod: %s -> %s (%d bytes, targetVersion=%s)",
                original_name, file_path.name, total_size, target_version)

    return UploadResponse(
        message="File uploaded successfully",
        filename=file_path.name,
        originalName=original_name,
    )


@router.get("/api/uploads")
def list_uploads(limit: int = 50):
    """查询最近的上传记录"""
    uploads = database.get_recent_uploads(limit=limit)

    return {
        "total": len(uploads),
        "uploads": [upload.to_dict() for upload in uploads]
    }
