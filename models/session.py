"""UploadSession / PollState 数据模型

UploadSession 是一次提交的临时状态，不做持久化。
PollState 记录日志轮询的计数和最近一次结果。
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Phase(str, Enum):
    """会话阶段"""
    IDLE = "idle"               # 空闲
    SELECTING = "selecting"     # 已选择文件
    UPLOADING = "uploading"     # 上传中
    CONVERTING = "converting"   # 等待转换结果
    POLLING = "polling"         # 轮询日志
    COMPLETE = "complete"       # 完成
    ERROR = "error"             # 失败（终态）


@dataclass(frozen=True)
class UploadSession:
    """单次提交的会话状态

    frozen：状态迁移总是返回新对象
    """
    phase: Phase = Phase.IDLE
    filename: str | None = None          # 选中的原始文件名
    version: str | None = None           # 目标版本（提交时必填）
    assigned_name: str | None = None     # 上传时使用的文件名
    progress: int = 0                    # 进度（0-100）
    message: str = ""                    # 展示给用户的状态文本
    result: Any = None                   # ConvertResult 或日志数据

    def to_dict(self) -> dict:
        """转换为字典"""
        return {
            "phase": self.phase.value,
            "filename": self.filename,
            "version": self.version,
            "assigned_name": self.assigned_name,
            "progress": self.progress,
            "message": self.message,
        }


@dataclass
class PollState:
    """轮询状态"""
    job: Any = None                      # schedule.Job（None 表示未在轮询）
    retry_count: int = 0                 # 连续失败次数
    last_outcome: str | None = None      # "success" / "failure"
    last_data: dict | None = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self.job is not None
