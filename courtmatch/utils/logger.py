"""
全局日志配置模块

courtmatch 各模块的日志器本身不挂handler，统一向上传递给包日志器 ``courtmatch``；
程序启动时调用 configure_logging 按配置替换包日志器的级别和输出位置，
导入时就已创建的模块日志器也会随之生效
"""
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "logs"

PACKAGE_LOGGER_NAME = 'courtmatch'

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LOG_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}


def _build_handlers(
    log_level: int,
    log_to_file: bool,
    log_to_console: bool,
    log_file_name: Optional[str],
    encoding: str
) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: List[logging.Handler] = []

    if log_to_console:
        handlers.append(logging.StreamHandler(sys.stdout))

    if log_to_file:
        if log_file_name is None:
            today = time.strftime('%Y_%m_%d', time.localtime())
            log_file_name = f"{today}.log"
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(LOGS_DIR / log_file_name, encoding=encoding, mode='a'))

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
    return handlers


def setup_logger(
    name: Optional[str] = None,
    level: str = 'INFO',
    log_to_file: bool = False,
    log_to_console: bool = True,
    log_file_name: Optional[str] = None,
    encoding: str = 'utf-8',
    replace_handlers: bool = False
) -> logging.Logger:
    """
    设置并返回一个独立输出的日志记录器（propagate=False）

    已有handler时默认直接返回；replace_handlers=True 时关闭旧handler并按新参数重建。
    文件日志仅在显式开启时写入 logs/ 目录
    """
    logger = logging.getLogger(name) if name else logging.getLogger()

    if logger.handlers and not replace_handlers:
        return logger

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)
    logger.setLevel(log_level)
    for handler in _build_handlers(log_level, log_to_file, log_to_console, log_file_name, encoding):
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    获取日志记录器

    包日志器尚未配置时先以默认参数（INFO、仅控制台）配置；
    courtmatch.* 子日志器不单独挂handler，级别和输出由包日志器决定
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    if not package_logger.handlers:
        setup_logger(name=PACKAGE_LOGGER_NAME)

    if name is None:
        return package_logger
    return logging.getLogger(name)


def configure_logging(
    level: str = 'INFO',
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_file_name: Optional[str] = None
) -> logging.Logger:
    """按配置重建包日志器（程序启动时调用，可重复调用以切换级别或输出位置）"""
    return setup_logger(
        name=PACKAGE_LOGGER_NAME,
        level=level,
        log_to_file=log_to_file,
        log_to_console=log_to_console,
        log_file_name=log_file_name,
        replace_handlers=True,
    )
