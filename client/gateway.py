"""Gateway / 转换后端 HTTP 客户端

所有网络错误在这里转换成 client.errors 中的异常，
诊断信息（状态码、异常类型、堆栈）写日志，用户只看到通用提示。
"""
import logging
from typing import BinaryIO

import httpx

from .config import ClientConfig
from .errors import (
    ConversionFailed,
    DownloadFailed,
    ModUpdaterError,
    NetworkError,
    ServerUnavailable,
    UploadFailed,
)
from .result import ConvertResult, DiffReport, parse_filename


logger = logging.getLogger(__name__)


# 报告下载接口 -> 默认文件名
REPORT_ENDPOINTS = {
    "download-diff": "diff_report.txt",
    "mod-file-diff": "mod_diff_report.txt",
}


class GatewayClient:
    """同步 HTTP 客户端

    Example:
        with GatewayClient(ClientConfig.from_env()) as gateway:
            gateway.health()
            gateway.upload("mod1.jar", f, "1.21")
    """

    def __init__(self, config: ClientConfig, transport: httpx.BaseTransport | None = None):
        self.config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=config.request_timeout,
            transport=transport,
        )

    def close(self):
        self._client.close()

    def __enter__(self) -> "GatewayClient":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, method: str, path: str, error_cls: type[ModUpdaterError], **kwargs) -> httpx.Response:
        """发送请求，非 2xx 抛 error_cls，连接失败抛 NetworkError"""
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error(
                "%s %s 网络错误: type=%s detail=%s",
                method, path, type(e).__name__, e,
                exc_info=True,
            )
            raise NetworkError(f"{method} {path}: {type(e).__name__}: {e}") from e

        if not response.is_success:
            logger.error(
                "%s %s 失败: status=%s reason=%s body=%.500s",
                method, path, response.status_code, response.reason_phrase, response.text,
            )
            raise error_cls(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )
        return response

    def _json(self, response: httpx.Response, error_cls: type[ModUpdaterError]) -> dict:
        """解析 JSON 响应体，不是 JSON 对象时抛 error_cls"""
        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                "%s %s 响应不是 JSON: status=%s body=%.500s",
                response.request.method, response.request.url.path, response.status_code, response.text,
            )
            raise error_cls(
                f"{response.request.url.path} returned a non-JSON body",
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            logger.error(
                "%s %s 响应不是 JSON 对象: %.500s",
                response.request.method, response.request.url.path, response.text,
            )
            raise error_cls(
                f"{response.request.url.path} returned {type(data).__name__}, expected an object",
                status_code=response.status_code,
            )
        return data

    def health(self) -> dict:
        """GET /api/health，非 200 抛 ServerUnavailable"""
        response = self._request("GET", "/api/health", ServerUnavailable)
        if response.status_code != 200:
            raise ServerUnavailable(
                f"health check returned {response.status_code}",
                status_code=response.status_code,
            )
        return self._json(response, ServerUnavailable)

    def upload(
        self,
        filename: str,
        content: bytes | BinaryIO,
        version: str | None = None,
        mime_type: str = "application/java-archive",
    ) -> dict:
        """POST /api/upload（multipart）"""
        files = {"file": (filename, content, mime_type)}
        data = {"targetVersion": version} if version else None
        logger.info("上传文件: %s (targetVersion=%s)", filename, version)
        response = self._request("POST", "/api/upload", UploadFailed, files=files, data=data)
        return self._json(response, UploadFailed)

    def convert(self, version: str) -> ConvertResult:
        """POST /api/convert"""
        logger.info("请求转换: version=%s", version)
        response = self._request("POST", "/api/convert", ConversionFailed, json={"version": version})
        return ConvertResult.from_json(self._json(response, ConversionFailed))

    def fetch_comparison_logs(self) -> dict:
        """GET /api/logs/version-comparison

        服务端返回 success=false 也视为失败
        """
        response = self._request(
            "GET",
            "/api/logs/version-comparison",
            NetworkError,
            headers={"Accept": "application/json"},
        )
        data = self._json(response, NetworkError)
        if not data.get("success"):
            raise NetworkError(f"log fetch reported failure: {data.get('error', 'unknown')}")
        return data

    def download_report(self, endpoint: str = "download-diff") -> DiffReport:
        """下载差异报告（二进制）"""
        if endpoint not in REPORT_ENDPOINTS:
            raise ValueError(f"未知的报告接口: {endpoint}")
        response = self._request(
            "GET",
            f"/api/logs/{endpoint}",
            DownloadFailed,
            headers={"Accept": "*/*"},
        )
        filename = parse_filename(
            response.headers.get("content-disposition"),
            REPORT_ENDPOINTS[endpoint],
        )
        logger.info("收到报告 %s: %d bytes", filename, len(response.content))
        return DiffReport(filename=filename, content=response.content)

    def latest_diff(self) -> DiffReport:
        """GET /api/logs/latest-diff（JSON 形式）"""
        response = self._request("GET", "/api/logs/latest-diff", DownloadFailed)
        data = self._json(response, DownloadFailed)
        return DiffReport(
            filename=data.get("filename") or self.config.default_report_name,
            content=(data.get("content") or "").encode("utf-8"),
            timestamp=data.get("timestamp"),
        )
