"""
CLI 模块

命令行接口实现。
"""

import asyncio

import click
from loguru import logger

from modpack_installer import __version__
from modpack_installer.exceptions import InstallerError
from modpack_installer.logger import setup_logger
from modpack_installer.models import DEFAULT_WORKERS, InstallerConfig
from modpack_installer.orchestrator import Installer
from modpack_installer.utils import load_manifest


async def run_async(manifest_source: str, config: InstallerConfig):
    """异步运行"""
    try:
        manifest = await load_manifest(manifest_source, config.user_agent)
        stats = await Installer(config, manifest).run()
    except InstallerError as e:
        logger.error(f"安装失败: {e}")
        raise click.ClickException(str(e))

    if stats is not None and stats.failed:
        logger.warning(f"{len(stats.failed)} 个模组安装失败，其余模组已安装")


@click.command()
@click.argument("manifest", default="modpack.json")
@click.option("--server", "-server", is_flag=True, help="安装为服务端（安装到当前目录）")
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=DEFAULT_WORKERS,
    show_default=True,
    help="并发 worker 数量",
)
@click.option("--balanced", is_flag=True, help="worker 从共享队列取任务，而不是静态分组")
@click.option("--debug", is_flag=True, help="启用调试模式")
@click.version_option(version=__version__)
def main(manifest: str, server: bool, workers: int, balanced: bool, debug: bool):
    """modpack-installer - 从 Modrinth 安装 Fabric 整合包

    MANIFEST 为整合包清单的路径或 URL (json/toml/yaml)，默认读取当前目录的
    modpack.json。不会根据可执行文件名推导清单地址；远程清单请直接传入 URL。
    """
    setup_logger(level="DEBUG" if debug else None)

    config = InstallerConfig(is_server=server, worker_count=workers, balanced=balanced)
    asyncio.run(run_async(manifest, config))


if __name__ == "__main__":
    main()
