"""
轮次排赛模块
按 轮次 x 场地 逐格贪心选取评分最低的候选比赛，生成整场训练/比赛的赛程

这是显式的贪心启发式：不回溯、不跨场地/跨轮次前瞻，只参考已排出的比赛。
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from courtmatch.core.exceptions import DuplicatePlayerId, InsufficientPlayers
from courtmatch.core.models import (
    OppositionRecord,
    PartnershipRecord,
    Player,
    ScheduledMatch,
)
from courtmatch.infra.matchmaking.match_scorer import MatchScorer, PairHistoryIndex
from courtmatch.infra.matchmaking.pairing_strategies import (
    ExhaustiveDoublesPairingStrategy,
    PairingStrategy,
)
from courtmatch.utils.logger import get_logger

logger = get_logger(__name__)

MIN_PLAYERS_PER_MATCH = 4
LARGE_POOL_WARNING_THRESHOLD = 32


class RoundScheduler:
    """轮次排赛器: 协调配对策略与比赛评分器，逐轮逐场地贪心排赛"""

    def __init__(
        self,
        pairing_strategy: Optional[PairingStrategy] = None,
        scorer: Optional[MatchScorer] = None
    ):
        self.pairing_strategy = pairing_strategy or ExhaustiveDoublesPairingStrategy()
        self.scorer = scorer or MatchScorer()

    def generate_schedule(
        self,
        player_pool: Sequence[Player],
        courts: int,
        rounds: int,
        partnership_history: Iterable[PartnershipRecord] = (),
        opposition_history: Iterable[OppositionRecord] = ()
    ) -> List[ScheduledMatch]:
        """生成赛程，返回按排赛顺序排列的比赛列表"""
        player_pool = list(player_pool)
        if len(player_pool) < MIN_PLAYERS_PER_MATCH:
            raise InsufficientPlayers(len(player_pool), MIN_PLAYERS_PER_MATCH)
        self._check_unique_ids(player_pool)

        if courts < 1 or rounds < 1:
            logger.warning(f"场地数或轮数不为正 (courts={courts}, rounds={rounds})，返回空赛程")
            return []

        if len(player_pool) > LARGE_POOL_WARNING_THRESHOLD:
            logger.warning(
                f"球员池共 {len(player_pool)} 人，候选比赛数量随人数四次方增长，排赛可能较慢"
            )

        partnerships = PairHistoryIndex.from_partnerships(partnership_history)
        oppositions = PairHistoryIndex.from_oppositions(opposition_history)

        logger.info(
            f"开始生成赛程: 球员数 {len(player_pool)}, 场地数 {courts}, 轮数 {rounds}, "
            f"搭档记录 {len(partnerships)} 条, 对手记录 {len(oppositions)} 条"
        )

        schedule: List[ScheduledMatch] = []
        for round_number in range(1, rounds + 1):
            round_matches = self._schedule_round(
                round_number=round_number,
                player_pool=player_pool,
                courts=courts,
                partnerships=partnerships,
                oppositions=oppositions,
                schedule=schedule,
            )
            benched = len(player_pool) - MIN_PLAYERS_PER_MATCH * len(round_matches)
            logger.info(f"第 {round_number}/{rounds} 轮: 安排 {len(round_matches)} 场, 轮空 {benched} 人")

        logger.info(f"赛程生成完成，共 {len(schedule)} 场比赛")
        return schedule

    def _schedule_round(
        self,
        round_number: int,
        player_pool: List[Player],
        courts: int,
        partnerships: PairHistoryIndex,
        oppositions: PairHistoryIndex,
        schedule: List[ScheduledMatch]
    ) -> List[ScheduledMatch]:
        """排一轮比赛，已选比赛直接追加到 schedule（跨轮次保留，供休息惩罚回看）"""
        available = list(player_pool)
        round_matches = []

        for court_number in range(1, courts + 1):
            if len(available) < MIN_PLAYERS_PER_MATCH:
                logger.debug(f"第 {round_number} 轮 {court_number} 号场地: 可用球员不足 4 人，空置")
                continue

            candidates = self.pairing_strategy.generate_candidates(available)
            if not candidates:
                logger.debug(f"第 {round_number} 轮 {court_number} 号场地: 无候选比赛，空置")
                continue

            best_candidate = None
            best_score = None
            for candidate in candidates:
                breakdown = self.scorer.score(candidate, partnerships, oppositions, schedule)
                # 严格小于：同分时保留生成顺序中的第一个
                if best_score is None or breakdown.total < best_score.total:
                    best_candidate = candidate
                    best_score = breakdown

            match = ScheduledMatch.from_candidate(best_candidate, round_number, court_number)
            schedule.append(match)
            round_matches.append(match)

            logger.debug(
                f"第 {round_number} 轮 {court_number} 号场地: {match.team1.ids} vs {match.team2.ids} "
                f"(总分 {best_score.total:.3f}, 均衡 {best_score.level_fairness:.3f}, "
                f"搭档 {best_score.partnership_variety:.3f}, 对手 {best_score.opposition_variety:.3f}, "
                f"休息 {best_score.player_rest:.3f}, 候选数 {len(candidates)})"
            )

            used_ids = set(match.player_ids)
            available = [player for player in available if player.id not in used_ids]

        return round_matches

    @staticmethod
    def _check_unique_ids(player_pool: Sequence[Player]):
        seen: Set[str] = set()
        for player in player_pool:
            if player.id in seen:
                raise DuplicatePlayerId(player.id)
            seen.add(player.id)


def generate_schedule(
    player_pool: Sequence[Player],
    courts: int,
    rounds: int,
    partnership_history: Iterable[PartnershipRecord] = (),
    opposition_history: Iterable[OppositionRecord] = ()
) -> List[ScheduledMatch]:
    """使用默认配对策略和默认评分权重生成赛程"""
    return RoundScheduler().generate_schedule(
        player_pool, courts, rounds, partnership_history, opposition_history
    )


def benched_players(
    schedule: Sequence[ScheduledMatch],
    player_pool: Sequence[Player],
    round_number: int
) -> List[Player]:
    """某一轮的轮空球员：球员池中未出现在该轮任何比赛中的球员（保持球员池顺序）"""
    assigned: Set[str] = set()
    for match in schedule:
        if match.round_number == round_number:
            assigned.update(match.player_ids)
    return [player for player in player_pool if player.id not in assigned]


def assign_benched_players(
    schedule: Sequence[ScheduledMatch],
    player_pool: Sequence[Player]
) -> Dict[Tuple[int, int], List[Player]]:
    """
    将每轮的轮空球员分配到同轮平均评分最接近的场地（同差值取靠前的场地）

    返回 {(轮次, 场地): [轮空球员, ...]}，仅包含分配到球员的场地
    """
    matches_by_round: Dict[int, List[ScheduledMatch]] = {}
    for match in schedule:
        matches_by_round.setdefault(match.round_number, []).append(match)

    assignments: Dict[Tuple[int, int], List[Player]] = {}
    for round_number, round_matches in matches_by_round.items():
        for player in benched_players(schedule, player_pool, round_number):
            best_match = None
            smallest_diff = float('inf')
            for match in round_matches:
                average = sum(p.skill_rating for p in match.players) / MIN_PLAYERS_PER_MATCH
                diff = abs(average - player.skill_rating)
                if diff < smallest_diff:
                    smallest_diff = diff
                    best_match = match
            key = (round_number, best_match.court_number)
            assignments.setdefault(key, []).append(player)

    return assignments
