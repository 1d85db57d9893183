"""
Modrinth API 客户端

所有请求都带固定 User-Agent；遇到 429 时按 X-Ratelimit-Reset 等待后重试。
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

import aiohttp
from loguru import logger

from modpack_installer.models import (
    DEFAULT_USER_AGENT,
    MODRINTH_BASE_URL,
    PackageInfo,
    ReleaseInfo,
)
from modpack_installer.exceptions import DecodeError, TransportError

RATE_LIMIT_HEADER = "X-Ratelimit-Reset"


class RegistryClient:
    """Modrinth API 客户端"""

    def __init__(
        self,
        base_url: str = MODRINTH_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[aiohttp.ClientSession] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rate_limit_fallback: int = 60,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.rate_limit_fallback = rate_limit_fallback
        self._session = session
        self._owned_session = session is None
        self._sleep = sleep

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    @property
    def headers(self) -> dict:
        return {"User-Agent": self.user_agent}

    def _reset_delay(self, response) -> int:
        """根据 X-Ratelimit-Reset 计算等待秒数（多等 1 秒）"""
        raw = response.headers.get(RATE_LIMIT_HEADER)
        try:
            reset = int(raw)
        except (TypeError, ValueError):
            logger.debug(f"响应缺少有效的 {RATE_LIMIT_HEADER}: {raw!r}")
            reset = self.rate_limit_fallback
        return max(reset, 0) + 1

    async def fetch(self, path: str) -> Any:
        """
        GET 一个 API 路径并返回解析后的 JSON

        Raises:
            TransportError: 网络错误或非 2xx 响应（429 除外）
            DecodeError: 响应体不是合法 JSON
        """
        url = f"{self.base_url}{path}"
        while True:
            try:
                async with self.session.get(url, headers=self.headers) as response:
                    if response.status == 429:
                        delay = self._reset_delay(response)
                    elif 200 <= response.status < 300:
                        try:
                            return await response.json(content_type=None)
                        except ValueError as e:
                            raise DecodeError(
                                f"响应不是合法的 JSON: {url}", response=response
                            ) from e
                    else:
                        raise TransportError(
                            f"API 请求失败 (状态码: {response.status})",
                            response=response,
                        )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise TransportError(
                    f"API 请求失败: {e}", context={"url": url}
                ) from e

            logger.warning(f"[限流] 触发 Modrinth 速率限制，{delay} 秒后重试 {url}")
            await self._sleep(delay)

    async def get_package(self, ref: str) -> PackageInfo:
        """获取项目信息"""
        return PackageInfo.from_modrinth(await self.fetch(f"/project/{ref}"))

    async def get_release(self, package_id: str, release_id: str) -> ReleaseInfo:
        """获取项目的某个版本"""
        data = await self.fetch(f"/project/{package_id}/version/{release_id}")
        return ReleaseInfo.from_modrinth(data)

    async def close(self):
        """关闭客户端"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
