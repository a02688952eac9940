# -*- coding: utf-8 -*-
"""工具模块"""

from .file_manager import FileManager
from .logger import Logger

__all__ = [
    'FileManager',
    'Logger',
]
