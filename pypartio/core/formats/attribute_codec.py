# -*- coding: utf-8 -*-
"""
属性值编解码
按 AttributeType 分派的封闭编解码函数集合

- 内存存储：小端 float32 (FLOAT/VECTOR)、小端 uint32 (INT)、小端 int32 (INDEXEDSTR)
- INT 按 32 位无符号整数保存；负数按位映射（-1 → 0xFFFFFFFF）
- 文件写入：大端，同宽度（4 字节）
- NONE 类型宽度为 0，不能写值
"""

import numbers
import struct
from typing import Union

from ..schema import AttributeType

Value = Union[int, float]

_STORAGE = {
    AttributeType.VECTOR: struct.Struct("<f"),
    AttributeType.FLOAT: struct.Struct("<f"),
    AttributeType.INT: struct.Struct("<I"),
    AttributeType.INDEXEDSTR: struct.Struct("<i"),
}

_WIRE = {
    AttributeType.VECTOR: struct.Struct(">f"),
    AttributeType.FLOAT: struct.Struct(">f"),
    AttributeType.INT: struct.Struct(">I"),
    AttributeType.INDEXEDSTR: struct.Struct(">i"),
}

INT32_MIN = -0x80000000
INT32_MAX = 0x7FFFFFFF
UINT32_MAX = 0xFFFFFFFF


def storage_width(ptype: AttributeType) -> int:
    """
    单个元素在内存中的字节宽度

    参数:
        ptype: 属性类型

    返回:
        字节数（NONE 为 0）
    """
    codec = _STORAGE.get(ptype)
    return codec.size if codec is not None else 0


def coerce_value(ptype: AttributeType, value) -> Value:
    """
    校验并规整一个分量值。

    浮点类型接受任意实数（bool 除外），整数类型只接受整数。
    INT 接受 [-2^31, 2^32)，负数映射为同位模式的 u32；
    INDEXEDSTR 接受 [0, 2^31)。类型不符抛出 TypeError，越界抛出 ValueError。
    """
    if ptype not in _STORAGE:
        raise TypeError(f"{ptype.name} attributes carry no values")
    if isinstance(value, bool):
        raise TypeError(f"bool is not a valid {ptype.name} value")

    if ptype.is_float:
        if not isinstance(value, numbers.Real):
            raise TypeError(f"{ptype.name} expects a real number, got {type(value).__name__}")
        return float(value)

    if not isinstance(value, numbers.Integral):
        raise TypeError(f"{ptype.name} expects an integer, got {type(value).__name__}")
    value = int(value)
    if ptype is AttributeType.INDEXEDSTR and value < 0:
        raise ValueError(f"string index must be non-negative, got {value}")
    if ptype is AttributeType.INT:
        if not INT32_MIN <= value <= UINT32_MAX:
            raise ValueError(f"{value} does not fit in 32 bits")
        return value & UINT32_MAX
    if value > INT32_MAX:
        raise ValueError(f"{value} does not fit in 32 bits")
    return value


def pack_into(ptype: AttributeType, buffer: bytearray, offset: int, value) -> None:
    """将一个分量按存储格式写入 buffer[offset:]"""
    _STORAGE[ptype].pack_into(buffer, offset, coerce_value(ptype, value))


def unpack_from(ptype: AttributeType, buffer, offset: int) -> Value:
    """从存储区读取一个分量"""
    codec = _STORAGE.get(ptype)
    if codec is None:
        raise TypeError(f"{ptype.name} attributes carry no values")
    if offset < 0 or offset + codec.size > len(buffer):
        raise ValueError(f"slice [{offset}:{offset + codec.size}] outside buffer of {len(buffer)} bytes")
    return codec.unpack_from(buffer, offset)[0]


def wire_bytes(ptype: AttributeType, value) -> bytes:
    """将一个分量编码为文件字节（大端）"""
    return _WIRE[ptype].pack(coerce_value(ptype, value))


def storage_to_wire(ptype: AttributeType, buffer, offset: int) -> bytes:
    """读取存储区的一个分量并重新编码为文件字节"""
    return _WIRE[ptype].pack(unpack_from(ptype, buffer, offset))
