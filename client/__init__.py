"""Mod 上传-转换-轮询客户端"""

from .config import ClientConfig, SUPPORTED_VERSIONS
from .errors import (
    ModUpdaterError,
    InvalidFileType,
    NoFileSelected,
    MissingVersion,
    UploadFailed,
    ConversionFailed,
    NetworkError,
    ServerUnavailable,
    DownloadFailed,
    PollExhausted,
)
from .gateway import GatewayClient
from .polling import LogPoller
from .result import ConvertResult, DiffReport, parse_filename, save_report, stage_report
from .storage import MemoryStore, NameMapping, SqliteStore
from .workflow import UploadWorkflow, render_result, transition

__all__ = [
    "ClientConfig",
    "SUPPORTED_VERSIONS",
    "ModUpdaterError",
    "InvalidFileType",
    "NoFileSelected",
    "MissingVersion",
    "UploadFailed",
    "ConversionFailed",
    "NetworkError",
    "ServerUnavailable",
    "DownloadFailed",
    "PollExhausted",
    "GatewayClient",
    "LogPoller",
    "ConvertResult",
    "DiffReport",
    "parse_filename",
    "save_report",
    "stage_report",
    "MemoryStore",
    "NameMapping",
    "SqliteStore",
    "UploadWorkflow",
    "render_result",
    "transition",
]
