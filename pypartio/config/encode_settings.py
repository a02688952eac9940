# -*- coding: utf-8 -*-
"""
编码配置
将调用方的选项转换为内部配置对象
"""

from typing import Any, Dict, Optional

from .constants import NAME_FRAMING_RAW, NAME_FRAMING_U16


class EncodeSettings:
    """BGEO 编码配置"""

    def __init__(self,
                 name_framing: str = NAME_FRAMING_RAW,
                 atomic_write: bool = True,
                 audit_path: Optional[str] = None,
                 verbose: bool = False):
        if name_framing not in (NAME_FRAMING_RAW, NAME_FRAMING_U16):
            raise ValueError(f"Unknown name framing: {name_framing!r}")
        self.name_framing = name_framing  # 属性名写法：raw / u16
        self.atomic_write = atomic_write  # 先写临时文件，成功后再替换
        self.audit_path = audit_path      # 不为空时写入 audit.log
        self.verbose = verbose            # 控制台日志

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "EncodeSettings":
        """从字典创建配置对象，忽略未知键"""
        settings = cls()
        if "name_framing" in options:
            framing = options["name_framing"]
            if framing not in (NAME_FRAMING_RAW, NAME_FRAMING_U16):
                raise ValueError(f"Unknown name framing: {framing!r}")
            settings.name_framing = framing
        settings.atomic_write = bool(options.get("atomic_write", settings.atomic_write))
        settings.audit_path = options.get("audit_path", settings.audit_path)
        settings.verbose = bool(options.get("verbose", settings.verbose))
        return settings

    def __repr__(self) -> str:
        return (f"EncodeSettings(name_framing={self.name_framing!r}, "
                f"atomic_write={self.atomic_write}, audit_path={self.audit_path!r}, "
                f"verbose={self.verbose})")
