# File: __init__.py
# Purpose: pypartio 主入口
# Notes:
# - 粒子容器：ParticlesSimple（列式存储，按属性分区）
# - 写值：write_value 顺序写入，write_value_at 按地址写入
# - 编码：BgeoWriter / encode_bytes / write_bgeo
#
# Example:
#
#     import pypartio
#
#     particles = pypartio.new_schema()
#     position = particles.add_attribute("position", pypartio.AttributeType.VECTOR, 3)
#     life = particles.add_attribute("life", pypartio.AttributeType.FLOAT, 2)
#     pid = particles.add_attribute("id", pypartio.AttributeType.INT, 1)
#     for i in range(5):
#         index = particles.add_particle()
#         particles.write_values([0.1 * i, 0.1 * (i + 1), 0.1 * (i + 2)])
#         particles.write_values([-1.2 + i, 10.0])
#         particles.write_value(index)
#     pypartio.write_bgeo("particles.bgeo", particles)

__version__ = "0.1.0"

from .config.encode_settings import EncodeSettings
from .core.errors import (
    EncodeIOError,
    ErrorCode,
    PartioError,
    ProtocolError,
    SchemaError,
    UnsupportedFeatureError,
)
from .core.particles import (
    ParticlesData,
    ParticlesDataMutable,
    ParticlesInfo,
    ParticlesSimple,
    ParticlesSimpleBuilder,
    new_schema,
)
from .core.schema import AttributeType, FixedAttribute, ParticleAttribute
from .utils.logger import Logger
from .writers.audit_writer import AuditLogger
from .writers.bgeo_writer import BgeoWriter, encode_bytes, write_bgeo

ParticleIndex = int

__all__ = [
    'AttributeType',
    'AuditLogger',
    'BgeoWriter',
    'EncodeIOError',
    'EncodeSettings',
    'ErrorCode',
    'FixedAttribute',
    'Logger',
    'ParticleAttribute',
    'ParticleIndex',
    'ParticlesData',
    'ParticlesDataMutable',
    'ParticlesInfo',
    'ParticlesSimple',
    'ParticlesSimpleBuilder',
    'PartioError',
    'ProtocolError',
    'SchemaError',
    'UnsupportedFeatureError',
    'encode_bytes',
    'new_schema',
    'write_bgeo',
]
