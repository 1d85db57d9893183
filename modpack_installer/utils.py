import json
from pathlib import Path
from typing import Any, Optional

import aiofiles
import aiohttp
import toml
import yaml

from modpack_installer.download import files
from modpack_installer.exceptions import ManifestError, ManifestNotFoundError
from modpack_installer.models import DEFAULT_USER_AGENT, Manifest


def parse_config(text: str, format: str) -> Any:
    """按格式 (json/toml/yaml) 解析配置文本"""
    try:
        if format == "json":
            return json.loads(text)
        elif format == "toml":
            return toml.loads(text)
        elif format in ("yaml", "yml"):
            return yaml.safe_load(text)
    except (ValueError, toml.TomlDecodeError, yaml.YAMLError) as e:
        raise ManifestError(f"无法解析 {format} 配置: {e}") from e
    raise ManifestError(f"不支持的配置文件格式: {format}")


def _format_of(source: str) -> str:
    suffix = Path(source.split("?", 1)[0]).suffix.lower().lstrip(".")
    return suffix if suffix in ("json", "toml", "yaml", "yml") else "json"


async def get_config(
    url: str, format: str, user_agent: str = DEFAULT_USER_AGENT
) -> Optional[Any]:
    async with aiohttp.ClientSession() as session:
        async with session.get(url, headers={"User-Agent": user_agent}) as response:
            if response.status != 200:
                return None
            return parse_config(await response.text(), format)


async def load_manifest(source: str, user_agent: str = DEFAULT_USER_AGENT) -> Manifest:
    """
    加载整合包清单

    Args:
        source: 本地路径 (.json/.toml/.yaml) 或 http(s) URL
    """
    if files.is_url(source):
        try:
            data = await get_config(source, _format_of(source), user_agent)
        except aiohttp.ClientError as e:
            raise ManifestNotFoundError(f"无法下载整合包清单: {source} ({e})") from e
        if data is None:
            raise ManifestNotFoundError(f"无法下载整合包清单: {source}")
        return Manifest.from_dict(data)

    if not files.exists(source):
        raise ManifestNotFoundError(f"整合包清单不存在: {source}")

    async with aiofiles.open(source, encoding="utf-8") as f:
        text = await f.read()
    return Manifest.from_dict(parse_config(text, _format_of(source)))
