"""数据模型"""
from .upload import UploadedFile
from .session import Phase, PollState, UploadSession

__all__ = [
    "UploadedFile",
    "Phase",
    "PollState",
    "UploadSession",
]
