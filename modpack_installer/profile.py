"""
启动器配置

在 .minecraft/launcher_profiles.json 中添加整合包的启动配置。
"""

import json
import os

from loguru import logger

from modpack_installer.download import files
from modpack_installer.exceptions import ConfigError
from modpack_installer.models import Manifest

PROFILE_ICON = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAIAAAACABAMAAAAxEHz4AAAA"
    "GFBMVEUAAAA4NCrb0LTGvKW8spyAem2uppSakn5SsnMLAAAAAXRSTlMAQObYZgAAAJ5JRE"
    "FUaIHt1MENgCAMRmFWYAVXcAVXcAVXcH3bhCYNkYjcKO8dSf7v1JASUWdZAlgb0PEmDSMA"
    "YYBdGkYApgf8ER3SbwRgesAf0BACMD1gB6S9IbkEEBfwY49oNj4lgLhA64C0o9R9RABTAv"
    "p4SX5kB2TA5y8EEAK4pRrxB9QcA4QBWkj3GCAMUCO/xwBhAI/kEsCagCHDY4AwAC3VA6t4"
    "zTAMj0OJAAAAAElFTkSuQmCC"
)
JAVA_ARGS = (
    "-Xmx4G -XX:+UnlockExperimentalVMOptions -XX:+UseG1GC -XX:G1NewSizePercent=20 "
    "-XX:G1ReservePercent=20 -XX:MaxGCPauseMillis=50 -XX:G1HeapRegionSize=32M"
)


def build_profile(manifest: Manifest, install_dir: str) -> dict:
    return {
        "name": manifest.name,
        "lastVersionId": manifest.loader,
        "gameDir": install_dir,
        "icon": PROFILE_ICON,
        "javaArgs": JAVA_ARGS,
    }


async def create_profile(minecraft_dir: str, manifest: Manifest, install_dir: str) -> str:
    """
    写入启动器配置，返回 launcher_profiles.json 路径

    Raises:
        ConfigError: 文件不存在、不是合法 JSON 或写入失败
    """
    path = os.path.join(minecraft_dir, "launcher_profiles.json")
    if not files.exists(path):
        raise ConfigError(f"找不到启动器配置: {path}")

    try:
        data = json.loads(await files.read(path))
    except ValueError as e:
        raise ConfigError(f"启动器配置不是合法的 JSON: {path}") from e

    profiles = data.setdefault("profiles", {})
    if not isinstance(profiles, dict):
        raise ConfigError(f"启动器配置中 'profiles' 不是对象: {path}")
    profiles[manifest.name] = build_profile(manifest, install_dir)

    try:
        await files.write(path, json.dumps(data, indent=2))
    except OSError as e:
        raise ConfigError(f"无法写入启动器配置: {e}", context={"path": path}) from e

    logger.success(f"[配置] 已添加启动器配置 '{manifest.name}'")
    return path
