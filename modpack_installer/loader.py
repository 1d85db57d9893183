"""
Fabric 加载器安装

客户端安装时，如果 .minecraft/versions 中没有整合包需要的加载器版本，
下载官方 Fabric Installer 并以 client 模式运行。
"""

import asyncio
import os
import tempfile

import aiohttp
from loguru import logger

from modpack_installer.download import files
from modpack_installer.exceptions import DownloadError, LoaderInstallError
from modpack_installer.models import DEFAULT_USER_AGENT, Manifest

FABRIC_INSTALLER_VERSION = "0.11.2"
FABRIC_INSTALLER_URL = (
    "https://maven.fabricmc.net/net/fabricmc/fabric-installer/"
    f"{FABRIC_INSTALLER_VERSION}/fabric-installer-{FABRIC_INSTALLER_VERSION}.jar"
)


class LoaderInstaller:
    """Fabric 加载器安装器"""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        versions_dir: str,
        user_agent: str = DEFAULT_USER_AGENT,
        java: str = "java",
    ):
        self.session = session
        self.versions_dir = versions_dir
        self.user_agent = user_agent
        self.java = java

    def is_installed(self, manifest: Manifest) -> bool:
        return files.exists(os.path.join(self.versions_dir, manifest.loader))

    def command(self, jar_path: str, manifest: Manifest) -> list:
        return [
            self.java,
            "-jar",
            jar_path,
            "client",
            "-loader",
            manifest.fabric,
            "-mcversion",
            manifest.target,
        ]

    async def install(self, manifest: Manifest) -> None:
        """
        下载并运行 Fabric Installer

        Raises:
            LoaderInstallError: 下载失败、找不到 java 或安装器返回非零退出码
        """
        jar_path = os.path.join(tempfile.gettempdir(), "fabric-installer.jar")
        logger.info(
            f"[加载器] 正在安装 Fabric {manifest.fabric} (MC {manifest.target})..."
        )

        try:
            await files.download(
                self.session,
                FABRIC_INSTALLER_URL,
                jar_path,
                headers={"User-Agent": self.user_agent},
            )
        except DownloadError as e:
            raise LoaderInstallError(f"无法下载 Fabric Installer: {e}") from e

        cmd = self.command(jar_path, manifest)
        logger.debug(f"运行: {' '.join(cmd)}")
        try:
            process = await asyncio.create_subprocess_exec(*cmd)
        except FileNotFoundError as e:
            raise LoaderInstallError(
                f"找不到 Java 可执行文件: {self.java}", context={"cmd": cmd}
            ) from e

        return_code = await process.wait()
        if return_code != 0:
            raise LoaderInstallError(
                f"Fabric Installer 退出码: {return_code}",
                context={"cmd": cmd, "return_code": return_code},
            )
        logger.success(f"[加载器] Fabric {manifest.fabric} 安装完成")
