# -*- coding: utf-8 -*-
"""
格式处理模块
"""

from .attribute_codec import (
    coerce_value,
    pack_into,
    storage_to_wire,
    storage_width,
    unpack_from,
    wire_bytes,
)

__all__ = [
    'coerce_value',
    'pack_into',
    'storage_to_wire',
    'storage_width',
    'unpack_from',
    'wire_bytes',
]
