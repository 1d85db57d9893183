"""
配置数据模型

整合包清单 (modpack.json) 与安装器运行配置。
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from modpack_installer.exceptions import ManifestError

DEFAULT_USER_AGENT = "Magix-Archive/modpack-installer"
MODRINTH_BASE_URL = "https://api.modrinth.com/v2"
FABRIC_LOADER = "fabric"
DEFAULT_WORKERS = 5


def default_minecraft_dir() -> str:
    """.minecraft 目录（Windows 下位于 %APPDATA%）"""
    appdata = os.environ.get("APPDATA")
    if sys.platform == "win32" and appdata:
        return os.path.join(appdata, ".minecraft")
    return os.path.join(os.path.expanduser("~"), ".minecraft")


@dataclass(frozen=True)
class DownloadTarget:
    """一次安装的下载目标，所有 worker 共享（只读）"""

    destination_directory: str
    platform_version: str
    loader: str = FABRIC_LOADER

    @property
    def mods_directory(self) -> str:
        return os.path.join(self.destination_directory, "mods")


@dataclass
class ExternalFile:
    """不在 Modrinth 上的额外文件"""

    url: str
    file: str
    extract: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ExternalFile":
        if not isinstance(data, dict):
            raise ManifestError(f"external 条目应为字典，但得到: {data!r}")
        if not data.get("url") or not data.get("file"):
            raise ManifestError(f"external 条目缺少 'url' 或 'file': {data}")
        return cls(url=data["url"], file=data["file"], extract=data.get("extract"))


@dataclass
class Manifest:
    """
    整合包清单

    Attributes:
        name: 整合包名称（也是启动器配置名）
        version: 整合包版本
        loader: 启动器中的版本 ID，例如 fabric-loader-0.14.21-1.20.1
        folder: 安装目录名
        target: Minecraft 版本
        fabric: Fabric 加载器版本
        mods: Modrinth 项目 ID 或 slug
        external: 额外文件
    """

    name: str
    version: str
    loader: str
    folder: str
    target: str
    fabric: str
    mods: List[str] = field(default_factory=list)
    external: List[ExternalFile] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Manifest":
        if not isinstance(data, dict):
            raise ManifestError("整合包清单应为一个对象")

        for key in ("name", "version", "loader", "folder", "target", "fabric"):
            value = data.get(key)
            if not value or not isinstance(value, str):
                raise ManifestError(f"整合包清单错误：请指定 '{key}'。")

        mods = data.get("mods", [])
        if not isinstance(mods, list):
            raise ManifestError("整合包清单错误：'mods' 应为列表。")
        for idx, mod in enumerate(mods):
            if not isinstance(mod, str) or not mod:
                raise ManifestError(
                    f"整合包清单错误：模组条目 #{idx + 1} 应为非空字符串，但得到: {mod!r}"
                )

        external = data.get("external", [])
        if not isinstance(external, list):
            raise ManifestError("整合包清单错误：'external' 应为列表。")

        return cls(
            name=data["name"],
            version=data["version"],
            loader=data["loader"],
            folder=data["folder"],
            target=data["target"],
            fabric=data["fabric"],
            mods=list(mods),
            external=[ExternalFile.from_dict(item) for item in external],
        )


@dataclass
class InstallerConfig:
    """安装器运行配置，由 CLI 创建后显式传递"""

    is_server: bool = False
    worker_count: int = DEFAULT_WORKERS
    balanced: bool = False
    user_agent: str = DEFAULT_USER_AGENT
    api_base: str = MODRINTH_BASE_URL
    install_root: str = field(default_factory=os.getcwd)
    minecraft_dir: str = field(default_factory=default_minecraft_dir)
    rate_limit_fallback: int = 60

    def __post_init__(self):
        if not isinstance(self.worker_count, int) or self.worker_count <= 0:
            raise ValueError("worker_count 必须为正整数")

    @property
    def versions_dir(self) -> str:
        return os.path.join(self.minecraft_dir, "versions")
