"""
modpack-installer 异常体系

分层的异常结构，带错误代码和上下文信息。

限流 (HTTP 429) 由 RegistryClient 内部重试，不会作为异常抛出；
"平台不支持" 与 "文件已存在" 属于正常的跳过结果，见 models.Outcome。
"""

from typing import Any, Dict, Optional

import aiohttp


class InstallerError(Exception):
    """基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigError(InstallerError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E100"


class ManifestError(ConfigError):
    """整合包清单内容错误"""

    def _get_default_code(self) -> str:
        return "E101"


class ManifestNotFoundError(ConfigError):
    """整合包清单不存在"""

    def _get_default_code(self) -> str:
        return "E102"


class APIError(InstallerError):
    """Registry API 相关错误"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        response: Optional[aiohttp.ClientResponse] = None,
    ):
        super().__init__(message, code, context)
        self.response = response
        if response is not None:
            self.context["status_code"] = response.status
            self.context["url"] = str(response.url)

    def _get_default_code(self) -> str:
        return "E200"


class TransportError(APIError):
    """网络错误或非 2xx/429 的响应"""

    def _get_default_code(self) -> str:
        return "E201"


class DecodeError(APIError):
    """响应不是预期的 JSON 结构"""

    def _get_default_code(self) -> str:
        return "E202"


class DownloadError(InstallerError):
    """下载相关错误"""

    def _get_default_code(self) -> str:
        return "E300"


class DownloadNetworkError(DownloadError):
    """下载网络错误"""

    def _get_default_code(self) -> str:
        return "E301"


class DownloadFileError(DownloadError):
    """下载文件写入错误"""

    def _get_default_code(self) -> str:
        return "E303"


class LoaderInstallError(InstallerError):
    """Fabric 加载器安装失败"""

    def _get_default_code(self) -> str:
        return "E400"


__all__ = [
    "InstallerError",
    "ConfigError",
    "ManifestError",
    "ManifestNotFoundError",
    "APIError",
    "TransportError",
    "DecodeError",
    "DownloadError",
    "DownloadNetworkError",
    "DownloadFileError",
    "LoaderInstallError",
]
