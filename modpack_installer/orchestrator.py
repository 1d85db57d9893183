"""
主协调器

整合所有服务层组件，实现整合包安装流程编排。
"""

import os
from typing import Optional

from loguru import logger

from modpack_installer.download import ArtifactWriter, files
from modpack_installer.exceptions import DownloadError, InstallerError
from modpack_installer.loader import LoaderInstaller
from modpack_installer.models import DownloadTarget, InstallerConfig, Manifest
from modpack_installer.profile import create_profile
from modpack_installer.services import (
    DependencyResolver,
    InstallStats,
    RegistryClient,
    WorkerPool,
)


class Installer:
    """整合包安装协调器"""

    def __init__(
        self,
        config: InstallerConfig,
        manifest: Manifest,
        client: Optional[RegistryClient] = None,
    ):
        self.config = config
        self.manifest = manifest
        self.client = client or RegistryClient(
            base_url=config.api_base,
            user_agent=config.user_agent,
            rate_limit_fallback=config.rate_limit_fallback,
        )

    @property
    def base_dir(self) -> str:
        """服务端安装到当前目录，客户端安装到 .minecraft/versions"""
        if self.config.is_server:
            return self.config.install_root
        return self.config.versions_dir

    @property
    def install_dir(self) -> str:
        return os.path.join(self.base_dir, self.manifest.folder)

    async def run(self) -> Optional[InstallStats]:
        """
        运行完整的安装流程

        Returns:
            模组安装统计；整合包已安装时返回 None
        """
        try:
            return await self._run()
        finally:
            await self.client.close()

    async def _run(self) -> Optional[InstallStats]:
        if not self.config.is_server:
            await self._ensure_loader()

        if files.exists(self.install_dir):
            logger.warning(f"整合包已安装: {self.install_dir}")
            return None

        logger.info(f"正在安装整合包 {self.manifest.name} v{self.manifest.version}...")

        files.create_dir(self.install_dir)
        files.create_dir(os.path.join(self.install_dir, "mods"))
        files.create_dir(os.path.join(self.install_dir, "config"))

        target = DownloadTarget(
            destination_directory=self.install_dir,
            platform_version=self.manifest.target,
        )

        writer = ArtifactWriter(self.client.session, self.config.user_agent)
        resolver = DependencyResolver(self.client, writer)
        pool = WorkerPool(
            resolver,
            target,
            is_server=self.config.is_server,
            worker_count=self.config.worker_count,
            balanced=self.config.balanced,
        )
        stats = await pool.run(self.manifest.mods)

        await self._download_external()

        if not self.config.is_server:
            await create_profile(
                self.config.minecraft_dir, self.manifest, self.install_dir
            )

        if stats.failed:
            logger.warning(f"以下模组安装失败: {', '.join(stats.failed)}")
        logger.success("整合包安装完成")
        return stats

    async def _ensure_loader(self) -> None:
        loader = LoaderInstaller(
            self.client.session, self.config.versions_dir, self.config.user_agent
        )
        if loader.is_installed(self.manifest):
            return
        try:
            await loader.install(self.manifest)
        except InstallerError as e:
            logger.error(f"[失败] {e}")

    async def _download_external(self) -> None:
        """下载额外文件；zip 且指定了 extract 时解压并删除压缩包"""
        for external in self.manifest.external:
            if "/" in external.file:
                files.create_dir(
                    os.path.join(self.install_dir, external.file.split("/")[0])
                )

            path = os.path.join(self.install_dir, external.file)
            try:
                await files.download(
                    self.client.session,
                    external.url,
                    path,
                    headers={"User-Agent": self.config.user_agent},
                )
            except DownloadError as e:
                logger.error(f"[失败] 下载 {external.file} 失败: {e}")
                continue
            logger.success(f"[下载] {external.file}")

            if external.file.endswith(".zip") and external.extract:
                destination = os.path.join(self.install_dir, external.extract)
                try:
                    files.extract_archive(path, destination)
                    files.delete(path)
                except (InstallerError, OSError) as e:
                    logger.error(f"[失败] 解压 {external.file} 失败: {e}")
                    continue
                logger.success(f"[解压] {external.file} -> {external.extract}")
