"""
并发分发

把用户指定的模组分给固定数量的 worker 并发处理。
"""

import asyncio
from typing import List, Sequence

from loguru import logger

from modpack_installer.models import DEFAULT_WORKERS, DownloadTarget, Outcome
from modpack_installer.services.dependency_resolver import (
    DependencyResolver,
    InstallStats,
)


def partition(items: Sequence[str], worker_count: int) -> List[List[str]]:
    """按下标轮询分组：第 i 个元素分给第 i % worker_count 个 worker"""
    if worker_count <= 0:
        raise ValueError("worker_count 必须为正整数")
    buckets: List[List[str]] = [[] for _ in range(worker_count)]
    for idx, item in enumerate(items):
        buckets[idx % worker_count].append(item)
    return buckets


class WorkerPool:
    """
    模组安装 worker 池

    默认按下标静态分组，每个 worker 顺序处理自己的那一组；
    balanced=True 时改为所有 worker 从同一个队列取任务。
    单个模组或单个 worker 失败只记录日志，不会取消其他 worker。
    """

    def __init__(
        self,
        resolver: DependencyResolver,
        target: DownloadTarget,
        is_server: bool = False,
        worker_count: int = DEFAULT_WORKERS,
        balanced: bool = False,
    ):
        self.resolver = resolver
        self.target = target
        self.is_server = is_server
        self.worker_count = worker_count
        self.balanced = balanced

    @property
    def stats(self) -> InstallStats:
        return self.resolver.state.stats

    async def _install(self, package_ref: str) -> None:
        try:
            await self.resolver.resolve_primary(
                self.target, package_ref, self.is_server
            )
        except Exception as e:
            logger.error(f"[失败] 模组 '{package_ref}' 安装失败: {e}")
            self.stats.record(package_ref, Outcome.FAILED)

    async def _worker(self, packages: List[str]) -> None:
        for package_ref in packages:
            await self._install(package_ref)

    async def _queue_worker(self, queue: asyncio.Queue) -> None:
        while True:
            try:
                package_ref = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                await self._install(package_ref)
            finally:
                queue.task_done()

    async def run(self, packages: Sequence[str]) -> InstallStats:
        """处理所有模组，等待全部 worker 结束后返回统计"""
        logger.info(
            f"开始安装 {len(packages)} 个模组 (并发数: {self.worker_count})..."
        )

        if self.balanced:
            queue: asyncio.Queue = asyncio.Queue()
            for package_ref in packages:
                queue.put_nowait(package_ref)
            coros = [self._queue_worker(queue) for _ in range(self.worker_count)]
        else:
            coros = [
                self._worker(bucket)
                for bucket in partition(packages, self.worker_count)
            ]

        tasks = [
            asyncio.create_task(coro, name=f"installer-worker-{i + 1}")
            for i, coro in enumerate(coros)
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for task, result in zip(tasks, results):
            if isinstance(result, BaseException):
                logger.error(f"[失败] {task.get_name()} 异常退出: {result!r}")

        logger.info(f"模组处理完成: {self.stats.summary()}")
        return self.stats
