# File: writers/__init__.py
# Purpose: Writers 模块初始化

"""
pypartio Writers Module
BGEO 编码器与审计日志写入器
"""

__all__ = [
    'bgeo_writer',
    'audit_writer',
]
