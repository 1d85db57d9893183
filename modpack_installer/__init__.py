"""
modpack-installer

从 Modrinth 解析并下载 Fabric 整合包中的模组及其必需依赖。
"""

__version__ = "0.1.0"
