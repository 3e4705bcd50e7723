"""Log Watcher - 命令行持续打印版本比较日志

Usage:
    python -m worker.watcher

环境变量见 client.config.ClientConfig.from_env()；
连续失败 MAX_RETRIES 次后退出（退出码 1），Ctrl+C 正常退出。
"""

import logging
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console

from client import ClientConfig, GatewayClient, LogPoller


logger = logging.getLogger(__name__)

console = Console()


class LogWatcher:
    """命令行日志观察器

    持续打印服务端的版本比较日志。
    """

    def __init__(self, config: ClientConfig):
        self.config = config
        self.gateway = GatewayClient(config)
        self.poller = LogPoller(
            fetch=self.gateway.fetch_comparison_logs,
            interval=config.poll_interval,
            max_retries=config.max_retries,
            on_result=self._print_logs,
        )
        self.should_stop = False
        self._seen_lines = 0

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """处理停止信号"""
        console.print("\n[yellow]收到停止信号，停止轮询...[/yellow]")
        self.should_stop = True

    def _print_logs(self, data: dict):
        logs = data.get("logs") or []
        # 只打印新增的行
        for line in logs[self._seen_lines:]:
            console.print(line, markup=False, highlight=False)
        self._seen_lines = len(logs)

        diff_report = data.get("diffReport") or []
        if diff_report:
            console.print(f"[bold green]Diff Report: {len(diff_report)} 行[/bold green]")

    def start(self) -> int:
        console.print("[bold green]🚀 Log Watcher 启动[/bold green]")
        console.print(f"服务地址: {self.config.base_url}")
        console.print(f"轮询间隔: {self.config.poll_interval} 秒\n")

        try:
            self.poller.run(should_stop=lambda: self.should_stop)
        finally:
            self.gateway.close()

        if self.poller.exhausted:
            console.print("[bold red]❌ 连续拉取失败，已停止轮询[/bold red]")
            return 1

        console.print("[bold yellow]Log Watcher 已停止[/bold yellow]")
        return 0


def main():
    """Watcher 入口"""
    load_dotenv()

    Path(".data").mkdir(exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('.data/worker.log'),
            logging.StreamHandler()
        ]
    )

    # 禁用第三方库的详细日志
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    try:
        watcher = LogWatcher(ClientConfig.from_env())
        sys.exit(watcher.start())
    except KeyboardInterrupt:
        console.print("\n[yellow]Watcher 被用户中断[/yellow]")
    except Exception as e:
        console.print(f"[bold red]Watcher 启动失败: {e}[/bold red]")
        logger.exception("Watcher 启动失败")
        sys.exit(1)


if __name__ == "__main__":
    main()
