# File: core/errors.py
# Purpose: 粒子数据与 BGEO 编码的异常体系
# Notes:
# - SchemaError: 属性定义错误（重名、粒子之后添加属性、缺少 position）
# - ProtocolError: 写值顺序/数量与属性定义不一致
# - EncodeIOError: 输出流创建/写入/刷新失败，附带路径与已写字节数
# - UnsupportedFeatureError: 未实现的格式特性（字符串表、固定属性值）

from typing import Optional


class ErrorCode:
    """错误码枚举"""

    # 属性定义错误 SCH***
    SCH001 = "SCH001"  # 缺少 position 属性
    SCH002 = "SCH002"  # 属性重名
    SCH003 = "SCH003"  # 已有粒子后添加属性
    SCH004 = "SCH004"  # 属性定义非法（名称/类型/分量数）

    # 写入协议错误 PRO***
    PRO001 = "PRO001"  # 写值顺序或类型与属性定义不一致
    PRO002 = "PRO002"  # 粒子数据未写完整

    # IO 错误 IO***
    IO001 = "IO001"    # 输出流写入失败

    # 未实现特性 UNS***
    UNS001 = "UNS001"  # 索引字符串表
    UNS002 = "UNS002"  # 固定属性值


class PartioError(Exception):
    """Base class for every error raised by pypartio."""

    code: str = ""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class SchemaError(PartioError, ValueError):
    """Attribute schema contract violation."""

    code = ErrorCode.SCH004


class ProtocolError(PartioError, RuntimeError):
    """Value writes that do not match the declared schema."""

    code = ErrorCode.PRO001


class UnsupportedFeatureError(PartioError, NotImplementedError):
    """Format feature that the encoder does not serialize."""

    code = ErrorCode.UNS002


class EncodeIOError(PartioError, OSError):
    """
    Sink failure during encoding.

    ``bytes_written`` is the number of bytes that reached the sink before the
    failure; ``path`` is the output path when encoding to a file.
    """

    code = ErrorCode.IO001

    def __init__(self, message: str, bytes_written: int = 0, path: Optional[str] = None):
        super().__init__(message)
        self.bytes_written = bytes_written
        self.path = path

    def __str__(self) -> str:
        text = self.args[0] if self.args else ""
        if self.path:
            text += f" (path: {self.path})"
        return f"{text} [{self.bytes_written} bytes written]"
