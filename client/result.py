"""转换结果和差异报告"""

import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path


logger = logging.getLogger(__name__)


@dataclass
class ConvertResult:
    """转换结果

    Attributes:
        added: 新增条目
        removed: 删除条目
        modified: 修改条目
        message: 后端返回的提示信息（只返回确认消息时其余为空）
        raw: 原始 JSON
    """

    added: list = field(default_factory=list)
    removed: list = field(default_factory=list)
    modified: list = field(default_factory=list)
    message: str | None = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: dict) -> "ConvertResult":
        return cls(
            added=list(data.get("added") or []),
            removed=list(data.get("removed") or []),
            modified=list(data.get("modified") or []),
            message=data.get("message"),
            raw=data,
        )

    def summary(self) -> str:
        return (
            f"Changes found: added={len(self.added)}, "
            f"removed={len(self.removed)}, modified={len(self.modified)}"
        )

    def __str__(self) -> str:
        return self.summary()


@dataclass
class DiffReport:
    """差异报告

    下载接口返回二进制内容；latest-diff 接口返回 JSON（timestamp + content）。
    """

    filename: str
    content: bytes
    timestamp: int | None = None

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


def parse_filename(content_disposition: str | None, default: str) -> str:
    """从 Content-Disposition 头取文件名，取不到时用默认值"""
    if not content_disposition or "filename=" not in content_disposition:
        return default
    name = content_disposition.split("filename=", 1)[1].split(";", 1)[0]
    name = name.strip().replace('"', "")
    # 只保留文件名部分，丢弃路径
    name = Path(name.replace("\\", "/")).name
    return name or default


def save_report(report: DiffReport, directory: str | Path) -> Path:
    """把报告保存到目录，返回文件路径"""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / report.filename
    path.write_bytes(report.content)
    logger.info("报告已保存: %s (%d bytes)", path, len(report.content))
    return path


def stage_report(report: DiffReport, cleanup_delay: float = 1.0) -> tuple[Path, threading.Timer]:
    """写入临时文件供下载，cleanup_delay 秒后删除

    Returns:
        (临时文件路径, 清理定时器)
    """
    staging_dir = Path(tempfile.mkdtemp(prefix="modupdater-"))
    path = save_report(report, staging_dir)

    def _cleanup():
        try:
            path.unlink(missing_ok=True)
            os.rmdir(staging_dir)
        except OSError:
            logger.warning("清理临时报告失败: %s", path, exc_info=True)

    timer = threading.Timer(cleanup_delay, _cleanup)
    timer.daemon = True
    timer.start()
    return path, timer
