# -*- coding: utf-8 -*-
"""
pypartio - Structure Checker
BGEO 输出文件的结构校验器
- Header 校验（magic / 版本 / 计数）
- 属性定义区逐项解析（u16 长度前缀，或按已知属性名匹配原始名字字节）
- 无属性定义时，由数据区长度反推 NONE 与 INDEXEDSTR 的分量数
- 粒子数据区长度与结尾标记校验
"""

import os
import struct
from typing import Dict, List, Optional

from ..config.constants import (
    BGEO_HEADER_SIZE,
    BGEO_MAGIC,
    BGEO_TRAILER,
    BGEO_VERSION,
    BGEO_VERSION_CHAR,
    NAME_FRAMING_RAW,
    NAME_FRAMING_U16,
    POSITION_ATTRIBUTE,
    POSITION_COMPONENTS,
    WIRE_CODE_FLOAT,
    WIRE_CODE_INDEXEDSTR,
    WIRE_ELEMENT_WIDTH,
)
from ..core.particles import ParticlesInfo

_COUNT_FIELDS = (
    "n_points", "n_prims", "n_point_groups", "n_prim_groups",
    "n_point_attrib", "n_vertex_attrib", "n_prim_attrib", "n_attrib",
)


class StructureChecker:
    def __init__(self, name_framing: str = NAME_FRAMING_RAW):
        self.name_framing = name_framing

    def check_file(self, filepath: str, particles: Optional[ParticlesInfo] = None) -> Dict:
        if not os.path.exists(filepath):
            return {"header": {}, "attributes": [], "errors": [f"文件不存在: {filepath}"], "warnings": []}
        with open(filepath, "rb") as f:
            data = f.read()
        report = self.check_bytes(data, particles)
        report["filepath"] = filepath
        return report

    def check_bytes(self, data: bytes, particles: Optional[ParticlesInfo] = None) -> Dict:
        """
        校验一段 BGEO 字节。

        原始名字写法下属性名没有边界，必须提供 particles 才能解析属性定义区；
        否则只校验 header 与结尾标记。
        """
        report = {
            "header": {},
            "attributes": [],
            "errors": [],
            "warnings": [],
        }

        if len(data) < BGEO_HEADER_SIZE + len(BGEO_TRAILER):
            report["errors"].append(f"文件过短: {len(data)} 字节")
            return report

        # ---- header ----
        if data[0:4] != BGEO_MAGIC:
            report["errors"].append(f"magic 错误: {data[0:4]!r}")
        if data[4:5] != BGEO_VERSION_CHAR:
            report["errors"].append(f"版本标记错误: {data[4:5]!r}")
        version = struct.unpack_from(">I", data, 5)[0]
        if version != BGEO_VERSION:
            report["errors"].append(f"版本号错误: 期望 {BGEO_VERSION}, 实际 {version}")
        counts = struct.unpack_from(">8I", data, 9)
        header = dict(zip(_COUNT_FIELDS, counts))
        header["version"] = version
        report["header"] = header

        for field in ("n_prims", "n_point_groups", "n_prim_groups", "n_vertex_attrib", "n_prim_attrib"):
            if header[field] != 0:
                report["warnings"].append(f"{field} 非零: {header[field]}")

        # ---- trailer ----
        if data[-len(BGEO_TRAILER):] != BGEO_TRAILER:
            report["errors"].append(f"结尾标记错误: {data[-len(BGEO_TRAILER):]!r}")

        # ---- attribute definitions ----
        if self.name_framing == NAME_FRAMING_RAW and particles is None:
            report["warnings"].append("原始名字写法且未提供属性定义，跳过属性定义区与数据区校验")
            return report

        offset = BGEO_HEADER_SIZE
        try:
            offset, attributes = self._parse_definitions(data, offset, header["n_point_attrib"], particles)
        except (ValueError, struct.error) as e:
            report["errors"].append(f"属性定义区解析失败: {e}")
            return report
        report["attributes"] = attributes

        # ---- particle data ----
        position_count = POSITION_COMPONENTS
        if particles is not None and particles.has_attribute(POSITION_ATTRIBUTE):
            position_count = particles.attribute_info(POSITION_ATTRIBUTE).count
        per_particle = (position_count + 1) * WIRE_ELEMENT_WIDTH
        open_attributes = []
        for attr in attributes:
            if attr["width"] is None or attr["count"] is None:
                open_attributes.append(attr)
            else:
                per_particle += attr["count"] * attr["width"]

        expected = offset + header["n_points"] * per_particle + len(BGEO_TRAILER)
        if not open_attributes or header["n_points"] == 0:
            if expected != len(data):
                report["errors"].append(f"文件长度错误: 期望 {expected}, 实际 {len(data)}")
            return report

        self._resolve_open_attributes(report, open_attributes, len(data) - expected, header["n_points"])
        return report

    def _parse_definitions(self, data: bytes, offset: int, n_attrib: int,
                           particles: Optional[ParticlesInfo]):
        """
        逐项解析属性定义。

        没有 particles 时：
        - 类型码 0 既可能是 FLOAT 也可能是 NONE，数据宽度记为 None（待定）
        - INDEXEDSTR 定义不含分量数，分量数记为 None（待定）
        """
        known = []
        if particles is not None:
            known = [a for a in particles.attributes() if a.name != POSITION_ATTRIBUTE]
            if len(known) != n_attrib:
                raise ValueError(f"n_point_attrib={n_attrib}, 属性定义 {len(known)} 个")

        attributes: List[Dict] = []
        for i in range(n_attrib):
            if self.name_framing == NAME_FRAMING_U16:
                (length,) = struct.unpack_from(">H", data, offset)
                offset += 2
                name = data[offset:offset + length].decode("utf-8")
                offset += length
            else:
                name = known[i].name
                encoded = name.encode("utf-8")
                if data[offset:offset + len(encoded)] != encoded:
                    raise ValueError(f"偏移 {offset} 处属性名不是 {name!r}")
                offset += len(encoded)

            if known and known[i].name != name:
                raise ValueError(f"属性名不一致: 期望 {known[i].name!r}, 实际 {name!r}")

            # INDEXEDSTR 只写类型码；普通定义的 u16 分量数至少为 1，
            # 所以前 4 字节读作 u32 时不可能等于 4
            (peek,) = struct.unpack_from(">I", data, offset)
            if known:
                is_indexed = known[i].type.wire_code == WIRE_CODE_INDEXEDSTR
            else:
                is_indexed = peek == WIRE_CODE_INDEXEDSTR
            if is_indexed:
                offset += 4
                attributes.append({"name": name, "type_code": peek,
                                   "count": known[i].count if known else None,
                                   "width": WIRE_ELEMENT_WIDTH})
                continue

            (count, code) = struct.unpack_from(">HI", data, offset)
            offset += 6
            defaults = struct.unpack_from(f">{count}I", data, offset)
            offset += 4 * count
            if any(defaults):
                raise ValueError(f"属性 {name} 默认值非零: {defaults}")
            if known:
                width = known[i].type.wire_width
            elif code == WIRE_CODE_FLOAT:
                width = None
            else:
                width = WIRE_ELEMENT_WIDTH
            attributes.append({"name": name, "type_code": code, "count": count, "width": width})

        return offset, attributes

    def _resolve_open_attributes(self, report: Dict, open_attributes: List[Dict],
                                 surplus: int, n_points: int) -> None:
        """
        用数据区剩余长度反推待定属性。

        surplus 为实际长度减去已确定部分的长度，必须是 n_points * 4 的非负整数倍，
        其商即每个粒子中待定属性的分量总数。
        """
        element = n_points * WIRE_ELEMENT_WIDTH
        if surplus < 0 or surplus % element:
            report["errors"].append(f"文件长度错误: 待定属性无法凑出剩余 {surplus} 字节")
            return
        components = surplus // element

        indexed = [a for a in open_attributes if a["count"] is None]
        optional = [a for a in open_attributes if a["count"] is not None]

        # 类型码 0 的属性各自贡献 0（NONE）或 count（FLOAT）个分量
        sums = {0}
        for attr in optional:
            sums |= {s + attr["count"] for s in sums}

        if not indexed:
            if components not in sums:
                report["errors"].append(
                    f"文件长度错误: 每粒子剩余 {components} 个分量, 无法由类型码 0 的属性组成"
                )
                return
            full = sum(a["count"] for a in optional)
            if components == full:
                for attr in optional:
                    attr["width"] = WIRE_ELEMENT_WIDTH
            else:
                names = ", ".join(a["name"] for a in optional)
                report["warnings"].append(
                    f"类型码 0 的属性 ({names}) 中有 {full - components} 个分量无数据, 推断含 NONE 属性"
                )
            return

        # 每个 INDEXEDSTR 至少 1 个分量
        feasible = [s for s in sums if components - s >= len(indexed)]
        if not feasible:
            report["errors"].append(
                f"文件长度错误: 每粒子剩余 {components} 个分量, 不足 {len(indexed)} 个字符串属性"
            )
            return
        if len(indexed) == 1 and not optional:
            indexed[0]["count"] = components
            return
        names = ", ".join(a["name"] for a in open_attributes)
        report["warnings"].append(f"属性 ({names}) 分量数无法唯一确定，只校验了长度下限")
