"""Log Poller - Periodically fetches version-comparison logs

Polling Policy:
    - Fetches once immediately, then every `interval` seconds
    - A failed fetch increments a consecutive-failure counter; a successful one
      resets it to zero but does NOT stop polling
    - Reaching `max_retries` consecutive failures stops polling permanently
      (the poller is marked exhausted)
    - Only one polling job per poller; start() while active is a no-op
    - stop() clears the job and resets the counter

Consumers decide when the data is "enough" (e.g. a diff report arrived)
and call stop() from the on_result callback.
"""

import logging
import time
from typing import Callable, Optional

import schedule

from models import PollState
from .errors import ModUpdaterError


logger = logging.getLogger(__name__)


class LogPoller:
    """日志轮询器

    fetch 抛出 ModUpdaterError 视为一次失败，返回值交给 on_result。
    """

    def __init__(
        self,
        fetch: Callable[[], dict],
        interval: float = 5.0,
        max_retries: int = 3,
        on_result: Optional[Callable[[dict], None]] = None,
        scheduler: Optional[schedule.Scheduler] = None,
    ):
        """初始化 Poller

        Args:
            fetch: 拉取函数
            interval: 轮询间隔（秒）
            max_retries: 允许的连续失败次数
            on_result: 成功拉取后的回调
            scheduler: 调度器（默认新建一个，不使用全局调度器）
        """
        self.fetch = fetch
        self.interval = interval
        self.max_retries = max_retries
        self.on_result = on_result
        self.scheduler = scheduler or schedule.Scheduler()
        self.state = PollState()
        self.exhausted = False

    @property
    def active(self) -> bool:
        return self.state.active

    @property
    def retry_count(self) -> int:
        return self.state.retry_count

    def start(self) -> bool:
        """开始轮询，已在轮询时返回 False"""
        if self.state.active:
            return False

        self.exhausted = False
        self.state.job = self.scheduler.every(self.interval).seconds.do(self.tick)
        logger.info("开始轮询，间隔 %s 秒，最多连续失败 %d 次", self.interval, self.max_retries)

        # 启动时立即拉取一次
        self.tick()
        return True

    def stop(self):
        """停止轮询并重置计数"""
        if self.state.job is not None:
            self.scheduler.cancel_job(self.state.job)
            self.state.job = None
            self.state.retry_count = 0
            logger.info("轮询已停止")

    def tick(self):
        """执行一次拉取"""
        if not self.state.active:
            return

        try:
            data = self.fetch()
        except ModUpdaterError as e:
            self.state.retry_count += 1
            self.state.last_outcome = "failure"
            logger.error(
                "Fetch attempt %d failed: %s (status=%s)",
                self.state.retry_count, e.detail, e.status_code,
            )
            if self.state.retry_count >= self.max_retries:
                logger.error("Max retries reached, stopping polling")
                self.stop()
                self.exhausted = True
            return

        self.state.retry_count = 0
        self.state.last_outcome = "success"
        self.state.last_data = data
        if self.on_result is not None:
            self.on_result(data)

    def run(self, sleep: Callable[[float], None] = time.sleep, should_stop: Callable[[], bool] = lambda: False):
        """阻塞运行，直到被停止或失败次数耗尽"""
        self.start()
        while self.state.active and not should_stop():
            self.scheduler.run_pending()
            if not self.state.active:
                break
            sleep(min(1.0, self.interval))
        self.stop()
