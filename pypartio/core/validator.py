# File: core/validator.py
# Purpose: 通用校验器，保证属性定义与粒子数据可以写成 BGEO
# Notes:
# - 命名规范：属性名非空、UTF-8 编码后不超过 u16 上限、不含 NUL
# - 属性定义：类型属于 AttributeType，分量数在 1~0xFFFF 之间
# - 编码前检查：必须有 position，固定属性值未实现，顺序写入必须完整
# - 所有检查在写出任何字节之前完成

from typing import List, Tuple, TYPE_CHECKING

from ..config.constants import (
    MAX_ATTRIBUTE_COUNT,
    MAX_ATTRIBUTE_NAME_LENGTH,
    POSITION_ATTRIBUTE,
    POSITION_COMPONENTS,
)
from .errors import (
    ErrorCode,
    ProtocolError,
    SchemaError,
    UnsupportedFeatureError,
)
from .schema import AttributeType

if TYPE_CHECKING:
    from .particles import ParticlesData


# ---------------------------
# 命名规范校验
# ---------------------------

def validate_name(name, max_len: int = MAX_ATTRIBUTE_NAME_LENGTH) -> Tuple[bool, str]:
    if not isinstance(name, str):
        return False, f"属性名必须是字符串: {name!r}"
    if not name:
        return False, "属性名为空"
    if "\x00" in name:
        return False, f"属性名包含 NUL 字符: {name!r}"
    if len(name.encode("utf-8")) > max_len:
        return False, f"属性名长度超过 {max_len} 字节"
    return True, "OK"


# ---------------------------
# 属性定义校验
# ---------------------------

def validate_attribute_definition(name, ptype, count) -> List[str]:
    errors: List[str] = []
    ok, msg = validate_name(name)
    if not ok:
        errors.append(msg)
    if not isinstance(ptype, AttributeType):
        errors.append(f"未知属性类型: {ptype!r}")
    if isinstance(count, bool) or not isinstance(count, int):
        errors.append(f"分量数必须是整数: {count!r}")
    elif not 1 <= count <= MAX_ATTRIBUTE_COUNT:
        errors.append(f"分量数必须在 1~{MAX_ATTRIBUTE_COUNT} 之间: {count}")
    return errors


def check_attribute_definition(name, ptype, count) -> None:
    """validate_attribute_definition 的抛异常版本"""
    errors = validate_attribute_definition(name, ptype, count)
    if errors:
        raise SchemaError("; ".join(errors), ErrorCode.SCH004)


# ---------------------------
# position 校验
# ---------------------------

def validate_position(particles: "ParticlesData") -> List[str]:
    errors: List[str] = []
    if not particles.has_attribute(POSITION_ATTRIBUTE):
        errors.append(f"缺少必需属性 '{POSITION_ATTRIBUTE}'")
        return errors
    position = particles.attribute_info(POSITION_ATTRIBUTE)
    if not position.type.is_float:
        errors.append(f"'{POSITION_ATTRIBUTE}' 必须是 VECTOR 或 FLOAT，实际为 {position.type.name}")
    if position.count < POSITION_COMPONENTS:
        errors.append(
            f"'{POSITION_ATTRIBUTE}' 至少需要 {POSITION_COMPONENTS} 个分量，实际为 {position.count}"
        )
    return errors


# ---------------------------
# 编码前综合校验
# ---------------------------

def validate_for_encoding(particles: "ParticlesData") -> List[Tuple[str, str, str]]:
    """
    返回 (错误码, 消息, 属性名) 形式的警告列表；发现错误时直接抛出对应异常。

    抛出:
        SchemaError: 缺少或错误定义 position
        UnsupportedFeatureError: 声明了固定属性
        ProtocolError: 最后一个粒子的顺序写入未完成
    """
    warnings: List[Tuple[str, str, str]] = []

    position_errors = validate_position(particles)
    if position_errors:
        code = ErrorCode.SCH001 if not particles.has_attribute(POSITION_ATTRIBUTE) else ErrorCode.SCH004
        raise SchemaError("; ".join(position_errors), code)

    if particles.num_fixed_attributes() > 0:
        names = [attr.name for attr in particles.fixed_attributes()]
        raise UnsupportedFeatureError(
            f"fixed attribute values are not serialized: {', '.join(names)}",
            ErrorCode.UNS002,
        )

    if not particles.is_complete():
        raise ProtocolError(
            f"particle {particles.num_particles() - 1} was only partially written",
            ErrorCode.PRO002,
        )

    for attr in particles.attributes():
        if attr.type is AttributeType.INDEXEDSTR:
            warnings.append((ErrorCode.UNS001, "字符串表未写入，仅写出索引", attr.name))
        elif attr.type is AttributeType.NONE:
            warnings.append((ErrorCode.SCH004, "类型为 NONE，不写出粒子数据", attr.name))

    return warnings
