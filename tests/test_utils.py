"""
工具模块单元测试
"""

import logging
import os

import pytest

from courtmatch.core.models import Player
from courtmatch.infra.matchmaking.round_scheduler import generate_schedule
from courtmatch.utils import logger as logger_module
from courtmatch.utils.env_loader import load_project_env
from courtmatch.utils.logger import (
    LOG_FORMAT,
    PACKAGE_LOGGER_NAME,
    configure_logging,
    get_logger,
    setup_logger,
)

SCHEDULER_LOGGER = 'courtmatch.infra.matchmaking.round_scheduler'


class RecordCollector(logging.Handler):
    """收集日志记录，便于断言"""

    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def package_logger():
    """测试结束后恢复包日志器的默认配置"""
    yield logging.getLogger(PACKAGE_LOGGER_NAME)
    configure_logging(level='INFO', log_to_file=False)


@pytest.fixture
def four_players():
    return [Player(player_id, player_id) for player_id in "ABCD"]


def test_load_project_env(tmp_path, monkeypatch):
    """测试加载.env文件"""
    monkeypatch.delenv('COURTMATCH_TEST_VALUE', raising=False)
    env_file = tmp_path / '.env'
    env_file.write_text('COURTMATCH_TEST_VALUE=from_dotenv\n', encoding='utf-8')

    assert load_project_env(env_file) is True
    assert os.getenv('COURTMATCH_TEST_VALUE') == 'from_dotenv'

    monkeypatch.delenv('COURTMATCH_TEST_VALUE', raising=False)


def test_load_project_env_missing_file(tmp_path):
    """测试.env文件不存在时返回False"""
    assert load_project_env(tmp_path / 'missing.env') is False


def test_setup_logger_console_only():
    """测试默认只配置控制台输出"""
    logger = setup_logger(name='courtmatch_standalone.console', level='DEBUG')

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    assert logger.handlers[0].formatter._fmt == LOG_FORMAT
    assert logger.propagate is False


def test_get_logger_module_loggers_propagate():
    """测试模块日志器不挂handler，统一交给包日志器输出"""
    first = get_logger('courtmatch.tests.reuse')
    second = get_logger('courtmatch.tests.reuse')

    assert first is second
    assert second.handlers == []
    assert second.propagate is True
    assert get_logger() is logging.getLogger(PACKAGE_LOGGER_NAME)
    assert logging.getLogger(PACKAGE_LOGGER_NAME).handlers


def test_scheduler_logger_has_no_own_handlers():
    """测试导入时创建的排赛日志器不会自带handler"""
    scheduler_logger = logging.getLogger(SCHEDULER_LOGGER)

    assert scheduler_logger.handlers == []
    assert scheduler_logger.propagate is True


def test_configure_logging_debug_reaches_scheduler(package_logger, four_players):
    """测试启动后再配置DEBUG级别，排赛模块的调试日志也会输出"""
    configure_logging(level='DEBUG', log_to_file=False)
    collector = RecordCollector()
    package_logger.addHandler(collector)
    try:
        generate_schedule(four_players, courts=2, rounds=1)
    finally:
        package_logger.removeHandler(collector)

    debug_records = [
        record for record in collector.records
        if record.levelno == logging.DEBUG and record.name == SCHEDULER_LOGGER
    ]
    assert debug_records
    assert any("空置" in record.getMessage() for record in debug_records)


def test_default_level_filters_debug(package_logger, four_players):
    """测试默认INFO级别下不输出调试日志"""
    configure_logging(level='INFO', log_to_file=False)
    collector = RecordCollector()
    package_logger.addHandler(collector)
    try:
        generate_schedule(four_players, courts=1, rounds=1)
    finally:
        package_logger.removeHandler(collector)

    assert collector.records
    assert all(record.levelno >= logging.INFO for record in collector.records)


def test_configure_logging_writes_module_logs_to_file(package_logger, four_players, tmp_path, monkeypatch):
    """测试开启文件日志后，模块日志写入logs目录"""
    monkeypatch.setattr(logger_module, 'LOGS_DIR', tmp_path / 'logs')
    configure_logging(level='DEBUG', log_to_file=True, log_to_console=False, log_file_name='session.log')

    generate_schedule(four_players, courts=1, rounds=1)
    for handler in package_logger.handlers:
        handler.flush()

    content = (tmp_path / 'logs' / 'session.log').read_text(encoding='utf-8')
    assert SCHEDULER_LOGGER in content
    assert 'DEBUG' in content
    assert '赛程生成完成' in content


def test_configure_logging_replaces_handlers(package_logger):
    """测试重复配置不会累积handler"""
    configure_logging(level='DEBUG', log_to_file=False)
    configure_logging(level='WARNING', log_to_file=False)

    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.WARNING
    assert package_logger.propagate is False
