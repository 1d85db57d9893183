"""
文件操作

文件存在性检查、读写、目录创建、HTTP 下载与 zip 解压。
"""

import asyncio
import os
import zipfile
from typing import Optional

import aiofiles
import aiohttp
from loguru import logger

from modpack_installer.exceptions import DownloadFileError, DownloadNetworkError


def exists(path: str) -> bool:
    """检查文件或目录是否存在"""
    return os.path.exists(path)


async def read(path: str) -> str:
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        return await f.read()


async def write(path: str, content: str) -> None:
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(content)


def delete(path: str) -> None:
    os.remove(path)


def create_dir(path: str) -> None:
    """创建目录（已存在时不做任何事）"""
    os.makedirs(path, exist_ok=True)


def is_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def _remove_partial(path: str) -> None:
    if os.path.exists(path):
        try:
            os.remove(path)
        except OSError:
            pass


async def download(
    session: aiohttp.ClientSession,
    url: str,
    path: str,
    headers: Optional[dict] = None,
    chunk_size: int = 8192,
) -> int:
    """
    下载文件并写入 path

    写入不是原子的：下载出错时会删除不完整的文件，但进程被强制结束时可能留下截断的文件。

    Returns:
        写入的字节数

    Raises:
        DownloadNetworkError: 网络错误或非 200 响应
        DownloadFileError: 写入磁盘失败
    """
    filename = os.path.basename(path)
    downloaded = 0
    try:
        async with session.get(url, headers=headers) as response:
            if response.status != 200:
                raise DownloadNetworkError(
                    f"HTTP {response.status}",
                    context={"url": url, "status": response.status},
                )

            try:
                total_size = int(response.headers.get("Content-Length", 0))
            except ValueError:
                total_size = 0
            async with aiofiles.open(path, "wb") as f:
                last_percent = 0.0
                async for chunk in response.content.iter_chunked(chunk_size):
                    await f.write(chunk)
                    downloaded += len(chunk)

                    if total_size > 0:
                        percent = (downloaded / total_size) * 100
                        if percent - last_percent >= 25:
                            logger.debug(f"[进度] {filename}: {percent:.1f}%")
                            last_percent = percent
    except DownloadNetworkError:
        _remove_partial(path)
        raise
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        _remove_partial(path)
        raise DownloadNetworkError(
            f"下载失败: {filename}", context={"url": url, "error": str(e)}
        ) from e
    except OSError as e:
        _remove_partial(path)
        raise DownloadFileError(
            f"写入文件失败: {path}", context={"path": path, "error": str(e)}
        ) from e

    return downloaded


def extract_archive(archive: str, destination: str) -> None:
    """
    解压 zip 到目标目录

    与常见整合包压缩方式一致：如果压缩包内只有一个顶层目录，则去掉这一层。
    """
    try:
        z = zipfile.ZipFile(archive)
    except zipfile.BadZipFile as e:
        raise DownloadFileError(
            f"不是合法的 zip 文件: {archive}", context={"archive": archive}
        ) from e

    with z:
        names = [n for n in z.namelist() if n]
        roots = {n.split("/", 1)[0] for n in names}
        strip = len(roots) == 1 and all("/" in n for n in names)

        os.makedirs(destination, exist_ok=True)
        for info in z.infolist():
            name = info.filename.split("/", 1)[1] if strip else info.filename
            if not name:
                continue
            target = os.path.normpath(os.path.join(destination, name))
            if not target.startswith(os.path.normpath(destination) + os.sep):
                raise DownloadFileError(
                    f"压缩包包含非法路径: {info.filename}",
                    context={"archive": archive},
                )
            if info.is_dir():
                os.makedirs(target, exist_ok=True)
                continue
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with z.open(info) as src, open(target, "wb") as dst:
                dst.write(src.read())
