# -*- coding: utf-8 -*-
"""
文件IO模块
"""

from .binary_writer import BinaryWriter

__all__ = [
    'BinaryWriter',
]
