"""客户端配置"""

import os
from dataclasses import dataclass, field


# 转换后端支持的目标版本
SUPPORTED_VERSIONS = [
    "1.21.4",
    "1.21.3",
    "1.21.2",
    "1.21.1",
    "1.21",
    "1.20.4",
    "1.20.3",
    "1.20.2",
    "1.20.1",
    "1.20",
]

RENAME_STRATEGIES = ("counter", "timestamp")
POST_UPLOAD_STRATEGIES = ("convert", "poll")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class ClientConfig:
    """上传-转换-轮询客户端配置

    Example:
        # 从环境变量创建
        config = ClientConfig.from_env()

        # 自定义配置
        config = ClientConfig(
            base_url="https://modupdater.onrender.com",
            rename_strategy="timestamp",
            post_upload="poll",
        )
    """

    base_url: str = "http://localhost:8000"

    # 文件选择
    allowed_extension: str = ".jar"

    # 流程策略
    rename_strategy: str = "counter"     # counter: modN.jar / timestamp: mod<ms>.jar
    post_upload: str = "convert"         # convert: 延迟后调用一次转换 / poll: 轮询日志

    # 时间参数（秒）
    convert_delay: float = 5.0
    poll_interval: float = 5.0
    max_retries: int = 3
    download_cleanup_delay: float = 1.0
    request_timeout: float = 60.0

    check_health: bool = True
    default_report_name: str = "diff_report.txt"

    # 本地持久化（计数器和文件名映射）
    store_path: str = field(default_factory=lambda: os.getenv("CLIENT_STORE_PATH", ".data/client_store.db"))

    def __post_init__(self):
        if self.rename_strategy not in RENAME_STRATEGIES:
            raise ValueError(
                f"不支持的 rename_strategy: {self.rename_strategy}，"
                f"支持: {', '.join(RENAME_STRATEGIES)}"
            )
        if self.post_upload not in POST_UPLOAD_STRATEGIES:
            raise ValueError(
                f"不支持的 post_upload: {self.post_upload}，"
                f"支持: {', '.join(POST_UPLOAD_STRATEGIES)}"
            )
        if self.max_retries < 1:
            raise ValueError("max_retries 必须 >= 1")
        if not self.allowed_extension.startswith("."):
            self.allowed_extension = f".{self.allowed_extension}"
        self.allowed_extension = self.allowed_extension.lower()
        self.base_url = self.base_url.rstrip("/")

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """从环境变量创建配置"""
        return cls(
            base_url=os.getenv("API_BASE_URL", "http://localhost:8000"),
            allowed_extension=os.getenv("ALLOWED_EXTENSION", ".jar"),
            rename_strategy=os.getenv("RENAME_STRATEGY", "counter").lower(),
            post_upload=os.getenv("POST_UPLOAD", "convert").lower(),
            convert_delay=float(os.getenv("CONVERT_DELAY", "5.0")),
            poll_interval=float(os.getenv("POLL_INTERVAL", "5.0")),
            max_retries=int(os.getenv("MAX_RETRIES", "3")),
            download_cleanup_delay=float(os.getenv("DOWNLOAD_CLEANUP_DELAY", "1.0")),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "60.0")),
            check_health=_env_bool("CHECK_HEALTH", "true"),
        )
