# -*- coding: utf-8 -*-
"""配置模块"""

from .constants import *
from .encode_settings import EncodeSettings

__all__ = [
    'EncodeSettings',
]
