# File: writers/bgeo_writer.py
# Purpose: 写入 .bgeo 文件（Houdini BGEO v5 粒子格式）
# Notes:
# - 写入顺序：Header → 属性定义 → 粒子数据 → 结尾标记
# - 所有多字节字段均为大端
# - position 属性隐式写出（不计入 n_point_attrib），z 之后补齐齐次坐标 w=1.0
# - 编码前完成全部校验，校验失败不写出任何字节

import io
from typing import BinaryIO, Optional

from ..config.constants import (
    BGEO_MAGIC,
    BGEO_TRAILER,
    BGEO_VERSION,
    BGEO_VERSION_CHAR,
    HOMOGENEOUS_W,
    NAME_FRAMING_U16,
    POSITION_ATTRIBUTE,
)
from ..config.encode_settings import EncodeSettings
from ..core.errors import EncodeIOError, PartioError
from ..core.formats.attribute_codec import storage_to_wire, storage_width, wire_bytes
from ..core.io.binary_writer import BinaryWriter
from ..core.particles import ParticlesData
from ..core.schema import AttributeType
from ..core.validator import validate_for_encoding
from ..utils.file_manager import FileManager
from ..utils.logger import Logger
from .audit_writer import AuditLogger

# 齐次坐标紧跟在 position 的第 3 个分量（下标 2）之后
_HOMOGENEOUS_AFTER_COMPONENT = 2


class BgeoWriter:
    """
    BgeoWriter
    ----------
    将 ParticlesData 编码为 BGEO v5 字节流。

    写入顺序:
        1. Header (magic "Bgeo" + 'V' + version + 8 个计数)
        2. 属性定义（position 除外）
        3. 粒子数据（逐粒子、逐属性、逐分量）
        4. 结尾标记 0x00 0xFF

    使用方式:
        writer = BgeoWriter()
        size = writer.write(particles, "output/particles.bgeo")
    """

    def __init__(self, settings: Optional[EncodeSettings] = None, logger: Optional[Logger] = None):
        self.settings = settings or EncodeSettings()
        self.logger = logger or Logger(verbose=self.settings.verbose)

    # ---- public API ----
    def encode(self, particles: ParticlesData, stream: BinaryIO) -> int:
        """
        写入二进制流

        参数:
            particles: 粒子数据（只读访问）
            stream: 可写的二进制流

        返回:
            写入的字节数
        """
        self._validate(particles, self.logger)
        return self._emit(particles, stream, self.logger)

    def write(self, particles: ParticlesData, filepath: str) -> int:
        """
        写入 .bgeo 文件

        atomic_write 为 True 时先写同目录临时文件，成功后替换目标文件；
        失败时删除临时文件，目标文件保持原状。
        设置了 audit_path 时，无论成败都会保存 audit.log；
        编码失败时 audit.log 保存失败只记录警告，不覆盖原异常。

        参数:
            particles: 粒子数据
            filepath: 输出文件路径

        返回:
            写入的字节数
        """
        logger = self.logger
        audit = None
        if self.settings.audit_path:
            audit = AuditLogger(self.settings.audit_path)
            audit.describe(particles)
            logger = Logger(audit_logger=audit, verbose=self.logger.verbose)

        target = FileManager.temp_path_for(filepath) if self.settings.atomic_write else filepath
        try:
            size = self._write_file(particles, filepath, target, logger)
        except BaseException:
            if self.settings.atomic_write:
                FileManager.remove_file(target)
            if audit is not None:
                try:
                    self._save_audit(audit)
                except EncodeIOError as e:
                    self.logger.warning(str(e), audit.filepath, e.code)
            raise

        if audit is not None:
            self._save_audit(audit)
        return size

    def _write_file(self, particles: ParticlesData, filepath: str, target: str,
                    logger: Logger) -> int:
        # 校验失败时不创建任何文件
        self._validate(particles, logger, context=filepath)
        try:
            FileManager.ensure_directory(filepath)
            with open(target, "wb") as fp:
                size = self._emit(particles, fp, logger, context=filepath)
        except EncodeIOError as e:
            e.path = filepath
            raise
        except OSError as e:
            raise EncodeIOError(f"cannot write output: {e}", 0, filepath) from e

        if self.settings.atomic_write:
            try:
                FileManager.replace(target, filepath)
            except OSError as e:
                raise EncodeIOError(f"cannot replace output: {e}", size, filepath) from e
        return size

    @staticmethod
    def _save_audit(audit: AuditLogger) -> None:
        try:
            FileManager.ensure_directory(audit.filepath)
            audit.save()
        except OSError as e:
            raise EncodeIOError(f"cannot save audit log: {e}", 0, audit.filepath) from e

    # ---- encoding ----
    def _validate(self, particles: ParticlesData, logger: Logger,
                  context: Optional[str] = None) -> None:
        try:
            warnings = validate_for_encoding(particles)
        except PartioError as e:
            logger.error(str(e), context, e.code)
            raise

        for code, message, attribute in warnings:
            logger.warning(message, context, code, attribute)

    def _emit(self, particles: ParticlesData, stream: BinaryIO, logger: Logger,
              context: Optional[str] = None) -> int:
        logger.info(
            f"开始编码 BGEO: {particles.num_particles()} 个粒子, "
            f"{particles.num_attributes()} 个属性",
            context,
        )

        bw = BinaryWriter(stream)
        try:
            self._write_header(bw, particles)
            self._write_attribute_definitions(bw, particles)
            self._write_particle_data(bw, particles)
            bw.write_bytes(BGEO_TRAILER)
            bw.flush()
        except EncodeIOError as e:
            logger.error(str(e), context, e.code)
            raise

        logger.info(f"BGEO 编码完成: {bw.bytes_written} 字节", context)
        return bw.bytes_written

    def _write_header(self, bw: BinaryWriter, particles: ParticlesData) -> None:
        """写入 magic、版本号与 8 个计数"""
        bw.write_bytes(BGEO_MAGIC)
        bw.write_bytes(BGEO_VERSION_CHAR)
        bw.write_u32(BGEO_VERSION)

        bw.write_u32(particles.num_particles())          # n_points
        bw.write_u32(0)                                  # n_prims
        bw.write_u32(0)                                  # n_point_groups
        bw.write_u32(0)                                  # n_prim_groups
        bw.write_u32(particles.num_attributes() - 1)     # n_point_attrib, position 隐式
        bw.write_u32(0)                                  # n_vertex_attrib
        bw.write_u32(0)                                  # n_prim_attrib
        bw.write_u32(particles.num_fixed_attributes())   # n_attrib

    def _write_attribute_definitions(self, bw: BinaryWriter, particles: ParticlesData) -> None:
        """写入除 position 外所有属性的定义"""
        for attr in particles.attributes():
            if attr.name == POSITION_ATTRIBUTE:
                continue

            if self.settings.name_framing == NAME_FRAMING_U16:
                bw.write_u16_string(attr.name)
            else:
                bw.write_bytes(attr.name.encode("utf-8"))

            if attr.type is AttributeType.INDEXEDSTR:
                # 字符串表未实现，仅写类型码
                bw.write_u32(attr.type.wire_code)
                continue

            bw.write_u16(attr.count)
            bw.write_u32(attr.type.wire_code)
            for _ in range(attr.count):
                bw.write_u32(0)  # 默认值

    def _write_particle_data(self, bw: BinaryWriter, particles: ParticlesData) -> None:
        """逐粒子写入属性值，每个粒子一次写入"""
        columns = []
        for attr in particles.attributes():
            width = storage_width(attr.type)
            if width == 0:
                continue
            columns.append((attr, width, particles.stride(attr), particles.raw_data(attr)))

        w_bytes = wire_bytes(AttributeType.FLOAT, HOMOGENEOUS_W)
        for index in range(particles.num_particles()):
            chunk = bytearray()
            for attr, width, stride, raw in columns:
                base = index * stride
                is_position = attr.name == POSITION_ATTRIBUTE
                for component in range(attr.count):
                    chunk += storage_to_wire(attr.type, raw, base + component * width)
                    if is_position and component == _HOMOGENEOUS_AFTER_COMPONENT:
                        chunk += w_bytes
            bw.write_bytes(bytes(chunk))


def encode_bytes(particles: ParticlesData, settings: Optional[EncodeSettings] = None) -> bytes:
    """
    便捷函数：编码为内存中的字节串

    参数:
        particles: 粒子数据
        settings: 编码配置
    """
    buffer = io.BytesIO()
    BgeoWriter(settings).encode(particles, buffer)
    return buffer.getvalue()


def write_bgeo(filepath: str, particles: ParticlesData,
               settings: Optional[EncodeSettings] = None,
               logger: Optional[Logger] = None) -> int:
    """
    便捷函数：写入 .bgeo 文件

    参数:
        filepath: 输出文件路径
        particles: 粒子数据
        settings: 编码配置
        logger: 日志记录器
    """
    return BgeoWriter(settings, logger).write(particles, filepath)
