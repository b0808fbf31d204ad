#!/usr/bin/env python3
"""
场次排赛脚本
读取场次YAML配置，生成双打赛程并保存为CSV

用法:
    python scripts/run_session.py --config courtmatch/configs/example_session.yaml
"""

import argparse
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

try:
    from courtmatch.core.exceptions import MatchmakingError
    from courtmatch.core.report import bench_to_dataframe, save_schedule, summarize_schedule
    from courtmatch.infra.config import ConfigManager
    from courtmatch.utils.env_loader import load_project_env
    from courtmatch.utils.logger import configure_logging, get_logger
except ImportError as e:
    print(f"导入错误: {e}")
    print("\n💡 提示: 请先安装项目依赖:")
    print("   pip install -e .")
    sys.exit(1)


def main() -> int:
    parser = argparse.ArgumentParser(description="courtmatch 双打排赛")
    parser.add_argument('--config', type=str, required=True, help='场次的YAML配置文件路径')
    args = parser.parse_args()

    load_project_env()

    try:
        config_manager = ConfigManager(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"配置加载失败: {e}")
        return 1

    logging_settings = config_manager.get_logging_settings()
    configure_logging(
        level=logging_settings.get('level', 'INFO'),
        log_to_file=logging_settings.get('log_to_file', False),
        log_to_console=True,
    )
    logger = get_logger('courtmatch.scripts.run_session')
    logger.info(f"courtmatch 排赛启动 - 配置文件: {args.config}")

    validation_errors = config_manager.validate_config()
    if validation_errors:
        logger.error("配置验证失败，发现以下问题：")
        for error in validation_errors:
            logger.error(f"  - {error}")
        logger.error("请修复配置文件后重试")
        return 1

    session_name = config_manager.get_session_name()
    players = config_manager.get_players()
    rounds = config_manager.get_rounds()
    scheduler = config_manager.build_scheduler()

    try:
        schedule = scheduler.generate_schedule(
            players,
            courts=config_manager.get_courts(),
            rounds=rounds,
            partnership_history=config_manager.get_partnership_history(),
            opposition_history=config_manager.get_opposition_history(),
        )
    except MatchmakingError as e:
        logger.error(f"排赛失败: {e}")
        return 1

    for match in schedule:
        logger.info(
            f"第 {match.round_number} 轮 {match.court_number} 号场地: "
            f"{match.team1.first.display_name} / {match.team1.second.display_name} vs "
            f"{match.team2.first.display_name} / {match.team2.second.display_name}"
        )

    bench = bench_to_dataframe(schedule, players, rounds)
    for round_number, group in bench.groupby('round'):
        logger.info(f"第 {round_number} 轮轮空: {', '.join(group['display_name'])}")

    summary = summarize_schedule(schedule, players)
    logger.info(
        f"共 {summary['total_matches']} 场, 上场次数极差 {summary['play_count_spread']:.0f}, "
        f"平均评分差 {summary['mean_rating_gap']:.1f}, 最大评分差 {summary['max_rating_gap']:.1f}"
    )

    output_path = save_schedule(
        schedule,
        players,
        session_name=session_name,
        output_dir=config_manager.get_output_dir(),
        filename_template=config_manager.get_filename_template(),
        rating_algorithm=config_manager.build_rating_algorithm(),
    )
    logger.info(f"{session_name} 排赛完成: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
