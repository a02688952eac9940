# File: core/schema.py
# Purpose: 粒子属性数据结构定义（dataclass）
# Notes:
# - AttributeType：属性元素类型（封闭集合）
# - ParticleAttribute：逐粒子属性，attribute_index 为插入顺序（即属性句柄）
# - FixedAttribute：整个数据集共享的常量属性（值不序列化）

from dataclasses import dataclass
from enum import Enum

from ..config.constants import (
    WIRE_CODE_FLOAT,
    WIRE_CODE_INDEXEDSTR,
    WIRE_CODE_INT,
    WIRE_CODE_VECTOR,
    WIRE_ELEMENT_WIDTH,
)


# ==================== 枚举类型 ====================

class AttributeType(Enum):
    """属性元素类型"""
    NONE = "none"
    VECTOR = "vector"           # 浮点分量组（通常 3 个）
    FLOAT = "float"
    INT = "int"
    INDEXEDSTR = "indexedstr"   # 指向外部字符串表的整数索引

    @property
    def wire_code(self) -> int:
        """属性定义区中的类型码"""
        return _WIRE_CODES.get(self, WIRE_CODE_FLOAT)

    @property
    def wire_width(self) -> int:
        """单个元素在文件中的字节宽度"""
        return 0 if self is AttributeType.NONE else WIRE_ELEMENT_WIDTH

    @property
    def is_float(self) -> bool:
        return self in (AttributeType.FLOAT, AttributeType.VECTOR)


_WIRE_CODES = {
    AttributeType.FLOAT: WIRE_CODE_FLOAT,
    AttributeType.INT: WIRE_CODE_INT,
    AttributeType.INDEXEDSTR: WIRE_CODE_INDEXEDSTR,
    AttributeType.VECTOR: WIRE_CODE_VECTOR,
}


# ==================== 属性数据结构 ====================

@dataclass(frozen=True)
class ParticleAttribute:
    """
    逐粒子属性。

    实例本身即属性句柄：attribute_index 在创建时确定且不再改变，
    所有按地址读写都通过它定位属性的数据区。
    """
    name: str                   # 属性名
    type: AttributeType         # 元素类型
    count: int                  # 分量数（VECTOR 通常为 3）
    attribute_index: int        # 插入顺序，从 0 开始连续


@dataclass(frozen=True)
class FixedAttribute:
    """整个数据集共享的常量属性（仅定义，不存值）"""
    name: str
    type: AttributeType
    count: int
    attribute_index: int
