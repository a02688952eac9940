# -*- coding: utf-8 -*-
"""校验模块"""

from .structure_checker import StructureChecker

__all__ = [
    'StructureChecker',
]
