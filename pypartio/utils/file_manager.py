# File: utils/file_manager.py
# Purpose: 统一文件管理
# Notes:
# - 目录创建
# - 与目标文件同目录的临时路径（保证 os.replace 不跨文件系统）
# - 原子替换与失败清理

import os
from typing import Optional


class FileManager:
    """
    文件管理器

    提供统一的文件操作接口，供 BgeoWriter 使用
    """

    @staticmethod
    def ensure_directory(file_path: str) -> None:
        """
        确保目录存在

        参数:
            file_path: 文件路径
        """
        directory = os.path.dirname(file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)

    @staticmethod
    def temp_path_for(file_path: str, suffix: str = ".tmp") -> str:
        """
        生成与目标文件同目录的临时文件路径

        参数:
            file_path: 目标文件路径
            suffix: 临时文件后缀

        返回:
            临时文件路径（如 dir/.particles.bgeo.1a2b3c4d.tmp）
        """
        directory, name = os.path.split(file_path)
        return os.path.join(directory, f".{name}.{os.urandom(4).hex()}{suffix}")

    @staticmethod
    def replace(src_path: str, dst_path: str) -> None:
        """
        用 src_path 原子替换 dst_path

        参数:
            src_path: 已写完的临时文件
            dst_path: 目标文件
        """
        os.replace(src_path, dst_path)

    @staticmethod
    def remove_file(file_path: Optional[str]) -> bool:
        """
        删除文件（失败时不抛异常）

        参数:
            file_path: 文件路径

        返回:
            是否删除成功
        """
        if not file_path:
            return False
        try:
            if os.path.exists(file_path):
                os.remove(file_path)
                return True
            return False
        except OSError:
            return False
