"""客户端异常

每个异常都带一条通用的 user_message，用于写到界面的状态文本；
状态码、异常类型等诊断信息只进日志。
"""
from typing import Optional


class ModUpdaterError(Exception):
    """客户端异常基类"""

    user_message = "Something went wrong. Please try again later."

    def __init__(self, detail: str = "", status_code: Optional[int] = None):
        self.detail = detail or self.user_message
        self.status_code = status_code
        super().__init__(self.detail)


class InvalidFileType(ModUpdaterError):
    user_message = "Invalid file type. Please select a .jar file."

    def __init__(self, filename: str, allowed_extension: str = ".jar"):
        self.filename = filename
        self.user_message = f"Invalid file type. Please select a {allowed_extension} file."
        super().__init__(f"{filename!r} does not end with {allowed_extension}")


class NoFileSelected(ModUpdaterError):
    user_message = "Please select a file first"


class MissingVersion(ModUpdaterError):
    user_message = "Please select a version"


class UploadFailed(ModUpdaterError):
    user_message = "Upload failed. Please try again."


class ConversionFailed(ModUpdaterError):
    user_message = "Conversion failed. Please try again."


class NetworkError(ModUpdaterError):
    user_message = "Network error occurred. Please try again in a few moments."


class ServerUnavailable(NetworkError):
    """健康检查未通过"""
    user_message = "Server is not available. Please try again later."


class DownloadFailed(ModUpdaterError):
    user_message = "Failed to download diff file. Please try again later."


class PollExhausted(ModUpdaterError):
    user_message = "Lost connection to the server. Please try again later."
