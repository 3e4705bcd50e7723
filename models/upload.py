"""UploadedFile 数据模型

UploadedFile 代表一个被上传的 mod 文件（通常是 .jar）。
客户端选择文件时创建，发送前重命名，Gateway 按分配的名字落盘后不再修改。
"""
from dataclasses import dataclass
from datetime import datetime


@dataclass
class UploadedFile:
    """上传文件模型

    original_name 是用户机器上的文件名，assigned_name 是重命名后的唯一文件名
    """
    original_name: str           # 原始文件名（如：sodium-fabric-0.5.8.jar）
    assigned_name: str           # 分配的唯一文件名（如：mod3.jar / mod_1718000000000.jar）
    mime_type: str               # MIME 类型
    file_size: int               # 文件大小（字节）

    # 仅服务端记录使用
    id: int | None = None
    file_path: str | None = None
    target_version: str | None = None
    uploaded_at: datetime | None = None

    def to_dict(self) -> dict:
        """转换为字典"""
        return {
            "id": self.id,
            "original_name": self.original_name,
            "assigned_name": self.assigned_name,
            "mime_type": self.mime_type,
            "file_size": self.file_size,
            "file_path": self.file_path,
            "target_version": self.target_version,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }
