"""日志和差异报告接口

读取转换后端写到 LOG_DIR / DIFF_DIR 的文件，始终返回最新的一份。
"""
import logging
from pathlib import Path
from typing import Callable, Optional

from fastapi import APIRouter
from fastapi.responses import FileResponse, JSONResponse

from api.config import GatewayConfig


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/logs")

LOG_PREFIX = "minecraft-mod-updater"


def get_latest_file(directory: Path, accept: Callable[[str], bool]) -> Optional[Path]:
    """按修改时间取目录中最新的文件，目录不存在或没有匹配时返回 None"""
    if not directory.is_dir():
        return None

    candidates = [p for p in directory.iterdir() if p.is_file() and accept(p.name)]
    if not candidates:
        return None

    return max(candidates, key=lambda p: p.stat().st_mtime)


def _read_lines(path: Optional[Path]) -> Optional[list[str]]:
    if path is None:
        return None
    return path.read_text(encoding="utf-8", errors="replace").splitlines()


def _not_found(message: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": message})


def _serve_report(prefix: str, label: str):
    config = GatewayConfig.from_env()
    try:
        report = get_latest_file(config.diff_dir, lambda name: name.startswith(prefix))
    except OSError:
        logger.exception("Error downloading %s", label)
        return JSONResponse(status_code=500, content={"error": "Failed to read diff report"})

    if report is None:
        logger.error("No %s found in %s", label, config.diff_dir)
        return _not_found(f"No {label} found")

    logger.info("Serving %s: %s", label, report)
    return FileResponse(report, media_type="text/plain", filename=report.name)


@router.get("/version-comparison")
def get_version_comparison_logs():
    """最新的转换日志和差异报告（按行）"""
    config = GatewayConfig.from_env()
    response: dict = {}

    try:
        logs = _read_lines(get_latest_file(config.log_dir, lambda name: name.startswith(LOG_PREFIX)))
        if logs is not None:
            response["logs"] = logs

        diff_report = _read_lines(get_latest_file(config.diff_dir, lambda name: name.startswith("diff_report")))
        if diff_report is not None:
            response["diffReport"] = diff_report

        response["success"] = True
    except OSError:
        logger.exception("Error reading logs")
        response = {"success": False, "error": "Failed to read logs"}

    return response


@router.get("/latest-diff")
def get_latest_diff():
    """最新的 .txt 差异报告（JSON）"""
    config = GatewayConfig.from_env()
    try:
        report = get_latest_file(config.diff_dir, lambda name: name.endswith(".txt"))
        if report is None:
            return _not_found("No diff report found")

        return {
            "content": report.read_text(encoding="utf-8", errors="replace"),
            "filename": report.name,
            "timestamp": int(report.stat().st_mtime * 1000),
        }
    except OSError:
        logger.exception("Error reading latest diff report")
        return JSONResponse(status_code=500, content={"error": "Failed to read diff report"})


@router.get("/download-diff")
def download_diff():
    """下载最新的差异报告"""
    return _serve_report("diff_report_", "diff report")


@router.get("/mod-file-diff")
def download_mod_file_diff():
    """下载最新的 mod 文件差异报告"""
    return _serve_report("diff_report_mod", "mod file diff report")


@router.get("/stream")
def stream_logs(lines: int = 100):
    """最新日志的最后 N 行"""
    config = GatewayConfig.from_env()
    try:
        log_lines = _read_lines(get_latest_file(config.log_dir, lambda name: name.startswith(LOG_PREFIX)))
    except OSError:
        logger.exception("Error streaming logs")
        return []

    if not log_lines:
        return []
    return log_lines[-lines:] if lines > 0 else []
