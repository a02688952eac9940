# -*- coding: utf-8 -*-
# File: core/__init__.py
# Purpose: Core 模块初始化

"""
pypartio Core Module
包含属性定义、粒子容器、编解码与校验器
"""

__all__ = [
    'schema',
    'errors',
    'particles',
    'validator',
    'formats',
    'io',
]
