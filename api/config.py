"""Gateway 配置"""

import os
from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_CORS_ORIGINS = (
    "http://localhost:5500,"
    "http://127.0.0.1:5500,"
    "https://goldfromgoldwila.github.io,"
    "https://modupdater.onrender.com"
)


@dataclass
class GatewayConfig:
    """上传 Gateway 配置

    每次请求都从环境变量读取，修改环境变量即时生效。
    """

    upload_dir: Path = Path(".data/uploads")
    max_upload_size_mb: int = 50
    cors_origins: list[str] = field(default_factory=lambda: DEFAULT_CORS_ORIGINS.split(","))

    # 转换后端写出的日志和差异报告
    log_dir: Path = Path("logs")
    diff_dir: Path = Path("diff_results")

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        """从环境变量创建配置"""
        origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
        return cls(
            upload_dir=Path(os.getenv("UPLOAD_DIR", ".data/uploads")),
            max_upload_size_mb=int(os.getenv("MAX_UPLOAD_SIZE_MB", "50")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_dir=Path(os.getenv("LOG_DIR", "logs")),
            diff_dir=Path(os.getenv("DIFF_DIR", "diff_results")),
        )
