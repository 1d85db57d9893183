"""
数据模型包

包含配置模型和 API 模型定义。
"""

from modpack_installer.models.config import (
    DEFAULT_USER_AGENT,
    DEFAULT_WORKERS,
    FABRIC_LOADER,
    MODRINTH_BASE_URL,
    DownloadTarget,
    ExternalFile,
    InstallerConfig,
    Manifest,
)
from modpack_installer.models.api import (
    SupportLevel,
    DependencyKind,
    Outcome,
    PackageInfo,
    FileInfo,
    DependencyInfo,
    ReleaseInfo,
)

__all__ = [
    # 配置模型
    "DEFAULT_USER_AGENT",
    "DEFAULT_WORKERS",
    "FABRIC_LOADER",
    "MODRINTH_BASE_URL",
    "DownloadTarget",
    "ExternalFile",
    "InstallerConfig",
    "Manifest",
    # API 模型
    "SupportLevel",
    "DependencyKind",
    "Outcome",
    "PackageInfo",
    "FileInfo",
    "DependencyInfo",
    "ReleaseInfo",
]
