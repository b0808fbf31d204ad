"""
工具模块
提供项目中使用的各种工具函数和类
"""

from courtmatch.utils.logger import (
    configure_logging,
    get_logger,
    setup_logger,
)
from courtmatch.utils.env_loader import load_project_env

__all__ = [
    'configure_logging',
    'get_logger',
    'setup_logger',
    'load_project_env',
]
