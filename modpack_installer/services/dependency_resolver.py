"""
依赖处理服务

解析用户指定的模组及其必需依赖，并按 "先依赖、后自身" 的顺序写入文件。
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from loguru import logger

from modpack_installer.download import ArtifactWriter
from modpack_installer.models import DownloadTarget, Outcome, PackageInfo, ReleaseInfo
from modpack_installer.services.api_client import RegistryClient
from modpack_installer.services.version_selector import VersionSelector
from modpack_installer.exceptions import DownloadError, InstallerError


@dataclass
class InstallStats:
    """安装统计"""

    results: Dict[Outcome, List[str]] = field(
        default_factory=lambda: {outcome: [] for outcome in Outcome}
    )

    def record(self, package_id: str, outcome: Outcome) -> None:
        self.results[outcome].append(package_id)

    def count(self, outcome: Outcome) -> int:
        return len(self.results[outcome])

    @property
    def failed(self) -> List[str]:
        return list(self.results[Outcome.FAILED])

    def summary(self) -> str:
        return ", ".join(
            f"{outcome.value}={len(ids)}" for outcome, ids in self.results.items()
        )


@dataclass
class ResolutionState:
    """
    一次安装运行内共享的状态

    所有 worker 运行在同一个事件循环上，claim 中间没有 await，因此不需要加锁。
    """

    visited: Set[str] = field(default_factory=set)
    stats: InstallStats = field(default_factory=InstallStats)

    def claim(self, package_id: str) -> bool:
        """登记一个项目 ID；已被登记过时返回 False"""
        if package_id in self.visited:
            return False
        self.visited.add(package_id)
        return True


@dataclass
class _Frame:
    package: PackageInfo
    release: ReleaseInfo
    expanded: bool = False


class DependencyResolver:
    """依赖解析器"""

    def __init__(
        self,
        client: RegistryClient,
        writer: ArtifactWriter,
        state: Optional[ResolutionState] = None,
    ):
        self.client = client
        self.writer = writer
        self.selector = VersionSelector(client)
        self.state = state or ResolutionState()

    async def _fetch(
        self, target: DownloadTarget, package_ref: str
    ) -> Tuple[PackageInfo, ReleaseInfo]:
        package = await self.client.get_package(package_ref)
        release = await self.selector.select(package, target)
        return package, release

    async def resolve_primary(
        self, target: DownloadTarget, package_ref: str, is_server: bool
    ) -> bool:
        """
        解析用户直接指定的模组

        当前端（客户端/服务端）不支持该模组时不写入任何文件、也不处理依赖。

        Returns:
            模组文件是否写入成功（不支持时为 False）

        Raises:
            InstallerError: 获取项目信息失败
        """
        package, release = await self._fetch(target, package_ref)

        if not package.supports(is_server):
            side = "服务端" if is_server else "客户端"
            logger.info(f"[跳过] {package.display_name} ({package.id}) 不支持{side}")
            self.state.stats.record(package.id, Outcome.UNSUPPORTED)
            return False

        if not self.state.claim(package.id):
            logger.debug(f"{package.display_name} ({package.id}) 已处理，跳过")
            self.state.stats.record(package.id, Outcome.DUPLICATE)
            return True

        outcome = await self._walk(target, package, release)
        return outcome.ok

    async def resolve_transitive(
        self, target: DownloadTarget, package_ref: str
    ) -> Outcome:
        """
        解析依赖模组（不检查客户端/服务端支持）

        失败只记录日志和统计，不抛出异常。
        """
        if not self.state.claim(package_ref):
            self.state.stats.record(package_ref, Outcome.DUPLICATE)
            return Outcome.DUPLICATE

        try:
            package, release = await self._fetch(target, package_ref)
        except InstallerError as e:
            logger.error(f"[失败] 无法获取依赖 '{package_ref}' 的详情: {e}")
            self.state.stats.record(package_ref, Outcome.FAILED)
            return Outcome.FAILED

        return await self._walk(target, package, release)

    async def _walk(
        self, target: DownloadTarget, root: PackageInfo, root_release: ReleaseInfo
    ) -> Outcome:
        """
        以栈代替递归遍历必需依赖

        节点第一次出栈时展开依赖并重新压栈，第二次出栈时写入文件，
        因此依赖总是先于依赖它的模组写入。
        """
        stack = [_Frame(root, root_release)]
        outcome = Outcome.FAILED

        while stack:
            frame = stack.pop()

            if frame.expanded:
                outcome = await self._write(target, frame.package, frame.release)
                continue

            frame.expanded = True
            stack.append(frame)

            children = []
            for dep_id in frame.release.required_dependencies():
                if not self.state.claim(dep_id):
                    logger.debug(f"依赖 '{dep_id}' 已处理，跳过")
                    continue
                logger.info(
                    f"    - {frame.package.display_name} 需要依赖: '{dep_id}'"
                )
                try:
                    dep_package, dep_release = await self._fetch(target, dep_id)
                except InstallerError as e:
                    logger.error(f"[失败] 无法获取依赖 '{dep_id}' 的详情: {e}")
                    self.state.stats.record(dep_id, Outcome.FAILED)
                    continue
                children.append(_Frame(dep_package, dep_release))

            # 倒序压栈，使依赖按 API 返回顺序处理
            stack.extend(reversed(children))

        # 根节点最后出栈，outcome 即根节点的结果
        return outcome

    async def _write(
        self, target: DownloadTarget, package: PackageInfo, release: ReleaseInfo
    ) -> Outcome:
        try:
            outcome = await self.writer.write(target, release, package)
        except (DownloadError, OSError, ValueError) as e:
            logger.error(f"[失败] {package.display_name} ({package.id}): {e}")
            outcome = Outcome.FAILED
        self.state.stats.record(package.id, outcome)
        return outcome
