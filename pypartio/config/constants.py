# -*- coding: utf-8 -*-
"""
BGEO 常量定义
"""

# BGEO 文件格式常量
BGEO_MAGIC = b"Bgeo"
BGEO_VERSION_CHAR = b"V"
BGEO_VERSION = 5
BGEO_TRAILER = b"\x00\xff"

# 头部：magic(4) + 'V'(1) + version(4) + 8 个计数(4 * 8)
BGEO_HEADER_SIZE = 4 + 1 + 4 + 8 * 4

# 每个元素在文件中的宽度（字节）
WIRE_ELEMENT_WIDTH = 4

# 属性类型在属性定义区中的类型码
WIRE_CODE_FLOAT = 0
WIRE_CODE_INT = 1
WIRE_CODE_INDEXEDSTR = 4
WIRE_CODE_VECTOR = 5

# 必须存在的位置属性
POSITION_ATTRIBUTE = "position"
POSITION_COMPONENTS = 3
HOMOGENEOUS_W = 1.0

# 属性名
MAX_ATTRIBUTE_NAME_LENGTH = 0xFFFF  # u16 长度前缀的上限
MAX_ATTRIBUTE_COUNT = 0xFFFF        # 属性分量数写为 u16

# 属性名的写入方式
NAME_FRAMING_RAW = "raw"   # 直接写入名字字节
NAME_FRAMING_U16 = "u16"   # u16 长度前缀 + 名字字节（Houdini 写法）

# 文件扩展名
EXT_BGEO = ".bgeo"
EXT_AUDIT = "audit.log"
