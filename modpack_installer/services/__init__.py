"""
服务层

包含业务逻辑服务：API 客户端、版本选择、依赖处理、并发分发。
"""

from modpack_installer.services.api_client import RegistryClient
from modpack_installer.services.version_selector import VersionSelector
from modpack_installer.services.dependency_resolver import (
    DependencyResolver,
    InstallStats,
    ResolutionState,
)
from modpack_installer.services.dispatcher import WorkerPool, partition

__all__ = [
    "RegistryClient",
    "VersionSelector",
    "DependencyResolver",
    "InstallStats",
    "ResolutionState",
    "WorkerPool",
    "partition",
]
