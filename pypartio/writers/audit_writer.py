# File: writers/audit_writer.py
# Purpose: 生成 audit.log，记录一次 BGEO 编码的粒子集概况与过程中的错误、警告
# Notes:
# - 文件头：输出路径、粒子数、属性表（名字:类型[分量数]）
# - 条目：时间戳 | 严重性 | 错误码 | 消息 | 属性 | 输出
# - 错误码见 core/errors.py ErrorCode（SCH/PRO/IO/UNS）

import time
from dataclasses import dataclass
from typing import List, Optional

from ..core.errors import ErrorCode
from ..core.particles import ParticlesInfo

__all__ = ["AuditEntry", "AuditLogger", "ErrorCode"]


@dataclass
class AuditEntry:
    """审计日志条目"""
    severity: str                       # ERROR / WARNING / INFO
    code: str                           # 错误码（如 UNS001），INFO 为空
    message: str
    output: Optional[str] = None        # 输出文件路径
    attribute: Optional[str] = None     # 相关属性名
    timestamp: str = ""


class AuditLogger:
    """
    AuditLogger
    -----------
    记录一次编码：先用 describe() 登记粒子集概况，再由 Logger 转发
    info/warning/error，最后 save() 写出 audit.log。

    使用方式:
        audit = AuditLogger("output/audit.log")
        audit.describe(particles)
        audit.warning("UNS001", "字符串表未写入", "particles.bgeo", "name")
        audit.save()
    """

    def __init__(self, filepath: str):
        self.filepath = filepath
        self.entries: List[AuditEntry] = []
        self.num_particles: Optional[int] = None
        self.schema: List[str] = []

    def describe(self, particles: ParticlesInfo) -> None:
        """登记粒子集概况（粒子数与属性表）"""
        self.num_particles = particles.num_particles()
        self.schema = [f"{a.name}:{a.type.name}[{a.count}]" for a in particles.attributes()]
        self.schema += [f"{a.name}:{a.type.name}[{a.count}] (fixed)" for a in particles.fixed_attributes()]

    def _add_entry(self, severity: str, code: str, message: str,
                   output: Optional[str], attribute: Optional[str]) -> None:
        self.entries.append(AuditEntry(
            severity=severity,
            code=code,
            message=message,
            output=output,
            attribute=attribute,
            timestamp=time.strftime("%Y-%m-%d %H:%M:%S", time.localtime()),
        ))

    def info(self, message: str, output: Optional[str] = None) -> None:
        self._add_entry("INFO", "", message, output, None)

    def warning(self, code: str, message: str, output: Optional[str] = None,
                attribute: Optional[str] = None) -> None:
        self._add_entry("WARNING", code, message, output, attribute)

    def error(self, code: str, message: str, output: Optional[str] = None,
              attribute: Optional[str] = None) -> None:
        self._add_entry("ERROR", code, message, output, attribute)

    def save(self) -> None:
        """保存 audit.log 到文件"""
        with open(self.filepath, "w", encoding="utf-8") as f:
            f.write("# pypartio BGEO Audit Log\n")
            f.write(f"# Generated: {time.strftime('%Y-%m-%d %H:%M:%S', time.localtime())}\n")
            if self.num_particles is not None:
                f.write(f"# Particles: {self.num_particles}\n")
                f.write(f"# Attributes: {', '.join(self.schema) or '-'}\n")
            f.write("# Format: [Timestamp] [Severity] [Code] Message | Attribute | Output\n")
            f.write("#" + "=" * 70 + "\n\n")

            for entry in self.entries:
                line = f"[{entry.timestamp}] [{entry.severity}]"
                if entry.code:
                    line += f" [{entry.code}]"
                line += f" {entry.message}"
                if entry.attribute:
                    line += f" | Attribute: {entry.attribute}"
                if entry.output:
                    line += f" | Output: {entry.output}"
                f.write(line + "\n")

            f.write(f"\n# {self.get_summary()}\n")

    def has_errors(self) -> bool:
        return any(e.severity == "ERROR" for e in self.entries)

    def has_warnings(self) -> bool:
        return any(e.severity == "WARNING" for e in self.entries)

    def codes(self) -> List[str]:
        """所有非空错误码（按记录顺序）"""
        return [e.code for e in self.entries if e.code]

    def attributes_for(self, code: str) -> List[str]:
        """带有指定错误码的属性名"""
        return [e.attribute for e in self.entries if e.code == code and e.attribute]

    def get_summary(self) -> str:
        error_count = sum(1 for e in self.entries if e.severity == "ERROR")
        warning_count = sum(1 for e in self.entries if e.severity == "WARNING")
        info_count = sum(1 for e in self.entries if e.severity == "INFO")

        return f"编码完成: {error_count} 错误, {warning_count} 警告, {info_count} 信息"
