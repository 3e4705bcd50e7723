"""上传-转换-轮询流程

transition() 是纯函数：给定会话和事件返回新会话，不做任何 I/O。
UploadWorkflow 负责 I/O（健康检查、重命名、上传、转换或轮询），
每一步都通过 transition() 推进状态。
"""
import logging
import time
from dataclasses import dataclass, replace
from typing import Any, BinaryIO, Callable, Optional, Union

import schedule

from models import Phase, UploadSession
from .config import ClientConfig
from .errors import InvalidFileType, MissingVersion, ModUpdaterError, NoFileSelected, PollExhausted
from .gateway import GatewayClient
from .naming import make_renamer, rename, validate_extension
from .polling import LogPoller
from .result import ConvertResult, DiffReport
from .storage import ModStore, NameMapping, SqliteStore


logger = logging.getLogger(__name__)


# ============================================================
# 事件
# ============================================================

@dataclass(frozen=True)
class Select:
    filename: Optional[str]


@dataclass(frozen=True)
class Submit:
    version: Optional[str]


@dataclass(frozen=True)
class Uploaded:
    assigned_name: str


@dataclass(frozen=True)
class Converted:
    result: ConvertResult


@dataclass(frozen=True)
class PollResult:
    data: dict


@dataclass(frozen=True)
class Fail:
    message: str


@dataclass(frozen=True)
class Reset:
    pass


Event = Union[Select, Submit, Uploaded, Converted, PollResult, Fail, Reset]


# ============================================================
# 状态迁移
# ============================================================

def transition(session: UploadSession, event: Event, config: ClientConfig) -> UploadSession:
    """状态迁移

    Idle → Selecting → Uploading → Converting|Polling → Complete，
    任意非 Idle 状态可进入 Error。非法的 (状态, 事件) 组合抛 ValueError。
    """
    phase = session.phase

    if isinstance(event, Reset):
        return UploadSession()

    if isinstance(event, Select):
        if phase not in (Phase.IDLE, Phase.SELECTING, Phase.COMPLETE, Phase.ERROR):
            raise ValueError(f"cannot select a file while {phase.value}")
        try:
            validate_extension(event.filename, config.allowed_extension)
        except (NoFileSelected, InvalidFileType) as e:
            # 回到 Idle，清空选择
            return UploadSession(message=e.user_message)
        return UploadSession(
            phase=Phase.SELECTING,
            filename=event.filename,
            message=f"Selected: {event.filename}",
        )

    if isinstance(event, Fail):
        if phase == Phase.IDLE:
            raise ValueError("cannot fail from idle")
        return replace(session, phase=Phase.ERROR, message=event.message)

    if isinstance(event, Submit):
        if phase == Phase.IDLE:
            return replace(session, phase=Phase.ERROR, message=NoFileSelected.user_message)
        if phase != Phase.SELECTING:
            raise ValueError(f"cannot submit while {phase.value}")
        if not event.version or not event.version.strip():
            return replace(session, phase=Phase.ERROR, message=MissingVersion.user_message)
        return replace(
            session,
            phase=Phase.UPLOADING,
            version=event.version.strip(),
            progress=25 if config.post_upload == "convert" else 0,
            message="Uploading...",
        )

    if isinstance(event, Uploaded):
        if phase != Phase.UPLOADING:
            raise ValueError(f"cannot finish upload while {phase.value}")
        if config.post_upload == "convert":
            return replace(
                session,
                phase=Phase.CONVERTING,
                assigned_name=event.assigned_name,
                progress=50,
                message="File uploaded! Waiting for processing...",
            )
        return replace(
            session,
            phase=Phase.POLLING,
            assigned_name=event.assigned_name,
            progress=50,
            message="File uploaded! Waiting for comparison logs...",
        )

    if isinstance(event, Converted):
        if phase != Phase.CONVERTING:
            raise ValueError(f"cannot complete conversion while {phase.value}")
        return replace(
            session,
            phase=Phase.COMPLETE,
            progress=100,
            result=event.result,
            message="Complete!",
        )

    if isinstance(event, PollResult):
        if phase != Phase.POLLING:
            raise ValueError(f"cannot accept poll result while {phase.value}")
        if event.data.get("diffReport"):
            return replace(
                session,
                phase=Phase.COMPLETE,
                progress=100,
                result=event.data,
                message="Complete!",
            )
        return replace(session, result=event.data)

    raise ValueError(f"unknown event: {event!r}")


# ============================================================
# 流程驱动
# ============================================================

class UploadWorkflow:
    """上传-转换-轮询客户端

    一次 run() 对应一次提交；同一会话内上传和转换严格串行。

    Example:
        workflow = UploadWorkflow(ClientConfig.from_env())
        with open("sodium.jar", "rb") as f:
            session = workflow.run("sodium.jar", f.read(), "1.21")
        print(session.message)
    """

    def __init__(
        self,
        config: ClientConfig,
        store: Optional[ModStore] = None,
        gateway: Optional[GatewayClient] = None,
        sleep: Callable[[float], None] = time.sleep,
        scheduler: Optional[schedule.Scheduler] = None,
    ):
        self.config = config
        self.store = store if store is not None else SqliteStore(config.store_path)
        self.mapping = NameMapping(self.store)
        self.renamer = make_renamer(config, self.store)
        self.gateway = gateway or GatewayClient(config)
        self.sleep = sleep
        self.scheduler = scheduler
        self.on_change: Optional[Callable[[UploadSession], None]] = None

    def _advance(self, session: UploadSession, event: Event) -> UploadSession:
        session = transition(session, event, self.config)
        logger.debug("会话状态: %s", session.to_dict())
        if self.on_change is not None:
            self.on_change(session)
        return session

    def run(
        self,
        filename: Optional[str],
        content: Union[bytes, BinaryIO, None],
        version: Optional[str],
        mime_type: str = "application/java-archive",
    ) -> UploadSession:
        """执行完整流程，返回最终会话（Complete 或 Error）

        失败不会抛出：诊断信息写日志，会话 message 为通用提示。
        """
        session = self._advance(UploadSession(), Select(filename))
        if session.phase != Phase.SELECTING:
            logger.warning("文件选择被拒绝: %r", filename)
            return session

        session = self._advance(session, Submit(version))
        if session.phase == Phase.ERROR:
            logger.warning("提交被拒绝: %s", session.message)
            return session

        try:
            if self.config.check_health:
                self.gateway.health()

            assigned_name = rename(filename, self.renamer, self.mapping)
            logger.info("Uploading file: originalName=%s newName=%s targetVersion=%s",
                        filename, assigned_name, session.version)
            self.gateway.upload(assigned_name, content, session.version, mime_type)
            session = self._advance(session, Uploaded(assigned_name))

            if self.config.post_upload == "convert":
                return self._convert(session)
            return self._poll(session)

        except ModUpdaterError as e:
            logger.error(
                "流程失败: phase=%s error=%s status=%s detail=%s",
                session.phase.value, type(e).__name__, e.status_code, e.detail,
                exc_info=True,
            )
            return self._advance(session, Fail(f"Error: {e.user_message}"))

    def _convert(self, session: UploadSession) -> UploadSession:
        # 等待后端处理上传的文件
        self.sleep(self.config.convert_delay)
        result = self.gateway.convert(session.version)
        logger.info("转换完成: %s", result.summary())
        return self._advance(session, Converted(result))

    def _poll(self, session: UploadSession) -> UploadSession:
        state = {"session": session}

        def on_result(data: dict):
            state["session"] = self._advance(state["session"], PollResult(data))
            if state["session"].phase == Phase.COMPLETE:
                poller.stop()

        poller = LogPoller(
            fetch=self.gateway.fetch_comparison_logs,
            interval=self.config.poll_interval,
            max_retries=self.config.max_retries,
            on_result=on_result,
            scheduler=self.scheduler,
        )
        poller.run(sleep=self.sleep)

        if poller.exhausted:
            raise PollExhausted(f"{self.config.max_retries} consecutive log fetches failed")
        return state["session"]

    def download_report(self, endpoint: str = "download-diff") -> DiffReport:
        """重新拉取差异报告（二进制）"""
        return self.gateway.download_report(endpoint)

    def close(self):
        self.gateway.close()


def render_result(result: Any) -> str:
    """把结果渲染成展示文本"""
    if isinstance(result, ConvertResult):
        return result.summary()
    if isinstance(result, dict):
        report = result.get("diffReport") or []
        if isinstance(report, list):
            return "\n".join(str(line) for line in report)
        return str(report)
    return "" if result is None else str(result)
