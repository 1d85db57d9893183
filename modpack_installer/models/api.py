"""
API 数据模型

定义 Modrinth 返回的项目信息、版本信息，以及单个模组的处理结果。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Set

from modpack_installer.exceptions import DecodeError


class SupportLevel(Enum):
    """客户端/服务端支持情况"""

    REQUIRED = "required"
    OPTIONAL = "optional"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


class DependencyKind(Enum):
    """依赖类型"""

    REQUIRED = "required"
    OPTIONAL = "optional"
    INCOMPATIBLE = "incompatible"
    EMBEDDED = "embedded"


class Outcome(Enum):
    """单个模组的处理结果"""

    DOWNLOADED = "downloaded"
    PRESENT = "present"  # 文件已存在
    SKIPPED = "skipped"  # 没有兼容版本
    UNSUPPORTED = "unsupported"  # 当前端不支持
    DUPLICATE = "duplicate"  # 本次运行已处理过
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self not in (Outcome.FAILED, Outcome.UNSUPPORTED)


@dataclass
class PackageInfo:
    """
    模组项目信息。
    """

    id: str
    display_name: str
    client_support: SupportLevel
    server_support: SupportLevel
    known_release_ids: List[str]

    def supports(self, is_server: bool) -> bool:
        """当前端（客户端/服务端）是否可以安装该模组"""
        level = self.server_support if is_server else self.client_support
        return level != SupportLevel.UNSUPPORTED

    @classmethod
    def from_modrinth(cls, data: Any) -> "PackageInfo":
        """
        将 Modrinth `/project/{id}` 的响应转换为 PackageInfo 对象。
        """
        try:
            versions = data["versions"]
            if not isinstance(versions, list):
                raise TypeError("versions 不是列表")
            return cls(
                id=data["id"],
                display_name=data.get("title") or data["id"],
                client_support=SupportLevel(data.get("client_side", "unknown")),
                server_support=SupportLevel(data.get("server_side", "unknown")),
                known_release_ids=[str(v) for v in versions],
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DecodeError(f"无法解析项目信息: {e}") from e


@dataclass
class FileInfo:
    """文件信息"""

    download_url: str
    filename: str


@dataclass
class DependencyInfo:
    """依赖信息"""

    target_package_id: Optional[str]
    kind: DependencyKind


@dataclass
class ReleaseInfo:
    """
    模组版本信息。

    files 为空表示没有可用的版本，调用方应当跳过，而不是报错。
    """

    owning_package_id: Optional[str] = None
    files: List[FileInfo] = field(default_factory=list)
    dependencies: List[DependencyInfo] = field(default_factory=list)
    supported_platform_versions: Set[str] = field(default_factory=set)
    supported_loaders: Set[str] = field(default_factory=set)

    @classmethod
    def empty(cls) -> "ReleaseInfo":
        """没有兼容版本时使用的空版本"""
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.files

    def required_dependencies(self) -> List[str]:
        """返回必需依赖的项目 ID（按 API 返回顺序）"""
        return [
            dep.target_package_id
            for dep in self.dependencies
            if dep.kind == DependencyKind.REQUIRED and dep.target_package_id
        ]

    @classmethod
    def from_modrinth(cls, data: Any) -> "ReleaseInfo":
        """
        将 Modrinth `/project/{id}/version/{version}` 的响应转换为 ReleaseInfo 对象。
        """
        try:
            files = [
                FileInfo(download_url=file["url"], filename=file["filename"])
                for file in data.get("files", [])
            ]
            dependencies = [
                DependencyInfo(
                    target_package_id=dep.get("project_id"),
                    kind=DependencyKind(dep.get("dependency_type") or "optional"),
                )
                for dep in data.get("dependencies", [])
            ]
            return cls(
                owning_package_id=data.get("project_id"),
                files=files,
                dependencies=dependencies,
                supported_platform_versions=set(data.get("game_versions", [])),
                supported_loaders=set(data.get("loaders", [])),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DecodeError(f"无法解析版本信息: {e}") from e
