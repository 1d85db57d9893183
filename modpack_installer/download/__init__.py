"""
下载层

包含文件操作和模组文件写入。
"""

from modpack_installer.download.writer import ArtifactWriter

__all__ = ["ArtifactWriter"]
