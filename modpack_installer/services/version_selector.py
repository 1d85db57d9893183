"""
版本选择服务

从项目的版本列表中挑出与目标 Minecraft 版本和加载器兼容的那一个。
"""

from loguru import logger

from modpack_installer.models import DownloadTarget, PackageInfo, ReleaseInfo
from modpack_installer.services.api_client import RegistryClient
from modpack_installer.exceptions import InstallerError


class VersionSelector:
    """版本选择器"""

    def __init__(self, client: RegistryClient):
        self.client = client

    @staticmethod
    def is_usable(release: ReleaseInfo, target: DownloadTarget) -> bool:
        """版本是否同时支持目标 Minecraft 版本和加载器"""
        return (
            target.platform_version in release.supported_platform_versions
            and target.loader in release.supported_loaders
        )

    async def select(self, package: PackageInfo, target: DownloadTarget) -> ReleaseInfo:
        """
        选择兼容版本

        API 按从旧到新的顺序返回版本 ID，这里倒序遍历，找到第一个兼容的版本就停止。
        单个版本获取失败只记录日志并继续尝试下一个。

        Returns:
            兼容的版本；没有时返回 ReleaseInfo.empty()
        """
        for release_id in reversed(package.known_release_ids):
            try:
                release = await self.client.get_release(package.id, release_id)
            except InstallerError as e:
                logger.warning(
                    f"[警告] 无法获取 {package.display_name} ({package.id}) 的版本 {release_id}: {e}"
                )
                continue

            if self.is_usable(release, target):
                logger.debug(
                    f"{package.display_name} 选中版本 {release_id} (MC {target.platform_version})"
                )
                return release

        return ReleaseInfo.empty()
