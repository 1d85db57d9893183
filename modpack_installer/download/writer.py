"""
模组文件写入

把选中的版本下载到 <安装目录>/mods/。
"""

import os
from typing import Optional
from urllib.parse import unquote

import aiohttp
from loguru import logger

from modpack_installer.download import files
from modpack_installer.exceptions import DownloadFileError
from modpack_installer.models import (
    DEFAULT_USER_AGENT,
    DownloadTarget,
    Outcome,
    PackageInfo,
    ReleaseInfo,
)


class ArtifactWriter:
    """模组文件写入器"""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.session = session
        self.user_agent = user_agent

    @staticmethod
    def destination(target: DownloadTarget, release: ReleaseInfo) -> str:
        """
        版本第一个文件的保存路径（文件名做 URL 解码）

        Raises:
            DownloadFileError: 解码后的文件名包含路径分隔符，或会写到 mods 目录之外
        """
        filename = unquote(release.files[0].filename)
        mods = os.path.normpath(target.mods_directory)
        path = os.path.normpath(os.path.join(mods, filename))
        if (
            "/" in filename
            or "\\" in filename
            or filename in ("", ".", "..")
            or os.path.dirname(path) != mods
        ):
            raise DownloadFileError(
                f"非法的文件名: {filename!r}",
                context={"filename": release.files[0].filename},
            )
        return path

    async def write(
        self,
        target: DownloadTarget,
        release: ReleaseInfo,
        package: Optional[PackageInfo] = None,
    ) -> Outcome:
        """
        下载版本文件

        一个版本可能有多个文件，只使用第一个。目标文件已存在时直接视为已安装。

        Raises:
            DownloadError: 下载或写入失败
        """
        label = self._label(package, release)

        if release.is_empty:
            logger.warning(f"[跳过] {label}: 没有兼容的版本")
            return Outcome.SKIPPED

        path = self.destination(target, release)
        if files.exists(path):
            logger.info(f"[跳过] {label}: {os.path.basename(path)} 已存在")
            return Outcome.PRESENT

        try:
            os.makedirs(target.mods_directory, exist_ok=True)
        except OSError as e:
            raise DownloadFileError(
                f"无法创建目录: {target.mods_directory}",
                context={"path": target.mods_directory, "error": str(e)},
            ) from e
        await files.download(
            self.session,
            release.files[0].download_url,
            path,
            headers={"User-Agent": self.user_agent},
        )
        logger.success(f"[下载] {label}: {os.path.basename(path)}")
        return Outcome.DOWNLOADED

    @staticmethod
    def _label(package: Optional[PackageInfo], release: ReleaseInfo) -> str:
        package_id = release.owning_package_id or (package.id if package else "")
        if package:
            return f"{package.display_name} ({package_id})"
        return package_id or "<unknown>"
