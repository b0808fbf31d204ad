"""
统一配置管理器
加载和解析YAML配置文件，支持环境变量解析、配置验证，并构建评分算法/评分器/排赛器
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
import yaml
import os

from courtmatch.core.models import (
    INITIAL_RATING,
    OppositionRecord,
    PartnershipRecord,
    Player,
)
from courtmatch.infra.matchmaking.match_scorer import (
    MatchScorer,
    NormalizationCaps,
    ScoringWeights,
)
from courtmatch.infra.matchmaking.rating_algorithms import (
    K_FACTOR,
    LOGISTIC_CONSTANT,
    DoublesEloRatingAlgorithm,
)
from courtmatch.infra.matchmaking.round_scheduler import RoundScheduler

DEFAULT_FILENAME_TEMPLATE = "{session}_schedule_{timestamp}.csv"

WEIGHT_KEYS = ('level_fairness', 'partnership_variety', 'opposition_variety', 'player_rest')
CAP_KEYS = ('level_gap', 'partnership_count', 'opposition_count')


class ConfigManager:
    """统一配置管理器: 加载YAML配置、解析环境变量、提供配置访问接口"""

    def __init__(self, config_path: str):
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"配置文件不存在: {config_path}")

        self._config = self._load_config()

    def _load_config(self) -> dict:
        """加载配置文件"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
                if not config:
                    raise ValueError("配置文件为空")
                return config
        except yaml.YAMLError as e:
            raise ValueError(f"配置文件格式错误: {e}")

    def _resolve_env_var(self, value):
        """解析环境变量格式的配置值，支持格式: env_var:VARIABLE_NAME"""
        if isinstance(value, str) and value.startswith("env_var:"):
            env_key = value[8:]  # 移除 "env_var:" 前缀
            env_value = os.getenv(env_key)
            if env_value is None:
                raise ValueError(f"环境变量 {env_key} 未设置")
            return env_value
        return value

    def get_raw_config(self) -> dict:
        """获取原始配置字典"""
        return self._config

    def get_session_name(self) -> str:
        """获取场次名称"""
        return self._config.get('session_name', 'courtmatch_session')

    def get_description(self) -> str:
        """获取场次描述"""
        return self._config.get('description', '')

    # ==================== 评分相关配置 ====================

    def get_rating_settings(self) -> Dict:
        """获取ELO评分设置"""
        return self._config.get('rating', {}) or {}

    def get_scoring_weights(self) -> ScoringWeights:
        """获取比赛评分权重，未配置的项使用默认值 10/5/3/8"""
        configured = (self._config.get('scoring', {}) or {}).get('weights', {}) or {}
        return ScoringWeights(**{key: float(configured[key]) for key in WEIGHT_KEYS if key in configured})

    def get_normalization_caps(self) -> NormalizationCaps:
        """获取归一化上限，未配置的项使用默认值 200/20/40"""
        configured = (self._config.get('scoring', {}) or {}).get('normalization', {}) or {}
        return NormalizationCaps(**{key: float(configured[key]) for key in CAP_KEYS if key in configured})

    def build_rating_algorithm(self) -> DoublesEloRatingAlgorithm:
        """根据配置构建双打ELO评分算法"""
        settings = self.get_rating_settings()
        return DoublesEloRatingAlgorithm(
            init_rating=settings.get('init_rating', INITIAL_RATING),
            k_factor=settings.get('k_factor', K_FACTOR),
            logistic_constant=settings.get('logistic_constant', LOGISTIC_CONSTANT),
        )

    def build_scorer(self) -> MatchScorer:
        """根据配置构建比赛评分器"""
        return MatchScorer(self.get_scoring_weights(), self.get_normalization_caps())

    def build_scheduler(self) -> RoundScheduler:
        """根据配置构建轮次排赛器"""
        return RoundScheduler(scorer=self.build_scorer())

    # ==================== 场次相关配置 ====================

    def get_session_settings(self) -> Dict:
        """获取场次设置"""
        return self._config.get('session', {}) or {}

    def get_courts(self) -> int:
        """获取场地数"""
        return int(self.get_session_settings().get('courts', 1))

    def get_rounds(self) -> int:
        """获取轮数"""
        return int(self.get_session_settings().get('rounds', 1))

    def get_players(self) -> List[Player]:
        """获取球员池（保持配置中的顺序）"""
        init_rating = self.build_rating_algorithm().get_initial_rating()
        players = []
        for entry in self.get_session_settings().get('players', []) or []:
            player_id = str(entry['id'])
            players.append(Player(
                id=player_id,
                display_name=entry.get('display_name', player_id),
                skill_rating=float(entry.get('skill_rating', init_rating)),
            ))
        return players

    def get_partnership_history(self) -> List[PartnershipRecord]:
        """获取搭档历史记录"""
        records = []
        for entry in self.get_session_settings().get('partnership_history', []) or []:
            records.append(PartnershipRecord(
                player1_id=str(entry['player1_id']),
                player2_id=str(entry['player2_id']),
                times_partnered=int(entry.get('times_partnered', 0)),
                last_partnered_at=self._parse_timestamp(entry.get('last_partnered_at')),
            ))
        return records

    def get_opposition_history(self) -> List[OppositionRecord]:
        """获取对手历史记录"""
        records = []
        for entry in self.get_session_settings().get('opposition_history', []) or []:
            records.append(OppositionRecord(
                player1_id=str(entry['player1_id']),
                player2_id=str(entry['player2_id']),
                times_opposed=int(entry.get('times_opposed', 0)),
                last_opposed_at=self._parse_timestamp(entry.get('last_opposed_at')),
            ))
        return records

    @staticmethod
    def _parse_timestamp(value) -> Optional[datetime]:
        """YAML 会将 ISO 时间直接解析为 datetime，字符串则按 ISO 格式解析"""
        if value is None or isinstance(value, datetime):
            return value
        return datetime.fromisoformat(str(value))

    # ==================== 输出与日志配置 ====================

    def get_output_settings(self) -> Dict:
        """获取输出配置"""
        return self._config.get('output', {}) or {}

    def get_output_dir(self) -> Path:
        """获取赛程输出目录，支持 env_var: 格式"""
        output_dir = self._resolve_env_var(self.get_output_settings().get('output_dir', 'results'))
        return Path(output_dir)

    def get_filename_template(self) -> str:
        """获取赛程文件名模板"""
        return self.get_output_settings().get('filename_template', DEFAULT_FILENAME_TEMPLATE)

    def get_logging_settings(self) -> Dict:
        """获取日志配置"""
        return self._config.get('logging', {}) or {}

    def validate_config(self) -> List[str]:
        """验证配置文件的完整性和有效性"""
        errors = []

        if not self._config.get('session_name'):
            errors.append("缺少必要配置: session_name")

        session = self.get_session_settings()
        if not session:
            errors.append("未配置 session")
            return errors

        for key in ('courts', 'rounds'):
            value = session.get(key)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(f"session.{key} 必须是正整数")

        players = session.get('players', []) or []
        if len(players) < 4:
            errors.append(f"至少需要 4 名球员，当前配置 {len(players)} 名")

        seen_ids = set()
        for idx, player in enumerate(players):
            if not isinstance(player, dict) or 'id' not in player:
                errors.append(f"球员配置 #{idx+1} 缺少 id 字段")
                continue
            player_id = str(player['id'])
            if player_id in seen_ids:
                errors.append(f"球员ID重复: {player_id}")
            seen_ids.add(player_id)
            rating = player.get('skill_rating')
            if rating is not None and (isinstance(rating, bool) or not isinstance(rating, (int, float))):
                errors.append(f"球员 {player_id} 的 skill_rating 不是数字")

        for section, count_key in (('partnership_history', 'times_partnered'),
                                   ('opposition_history', 'times_opposed')):
            for idx, entry in enumerate(session.get(section, []) or []):
                if not isinstance(entry, dict) or 'player1_id' not in entry or 'player2_id' not in entry:
                    errors.append(f"{section} #{idx+1} 缺少 player1_id/player2_id")
                    continue
                if str(entry['player1_id']) == str(entry['player2_id']):
                    errors.append(f"{section} #{idx+1} 的两名球员相同")
                count = entry.get(count_key, 0)
                if not isinstance(count, int) or isinstance(count, bool) or count < 0:
                    errors.append(f"{section} #{idx+1} 的 {count_key} 必须是非负整数")

        scoring = self._config.get('scoring', {}) or {}
        for key, value in (scoring.get('weights', {}) or {}).items():
            if key not in WEIGHT_KEYS:
                errors.append(f"未知的评分权重: {key}")
            elif isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                errors.append(f"评分权重 {key} 必须是非负数")
        for key, value in (scoring.get('normalization', {}) or {}).items():
            if key not in CAP_KEYS:
                errors.append(f"未知的归一化上限: {key}")
            elif isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                errors.append(f"归一化上限 {key} 必须是正数")

        k_factor = self.get_rating_settings().get('k_factor', K_FACTOR)
        if isinstance(k_factor, bool) or not isinstance(k_factor, (int, float)) or k_factor <= 0:
            errors.append("rating.k_factor 必须是正数")

        return errors
