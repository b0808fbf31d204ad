"""
评分算法模块
提供双打ELO评分：队伍评分取两名球员平均值，同队两人获得相同的分差
"""

from abc import ABC, abstractmethod
from typing import Sequence
import math

from courtmatch.core.exceptions import InvalidTeamSize
from courtmatch.core.models import INITIAL_RATING, MatchRatingResult

K_FACTOR = 32
LOGISTIC_CONSTANT = 400
TEAM_SIZE = 2


def round_half_up(value: float) -> int:
    """四舍五入到整数，.5 一律向正无穷方向取整（-2.5 -> -2）"""
    return int(math.floor(value + 0.5))


class RatingAlgorithm(ABC):
    """评分算法基类: 定义评分算法接口"""

    @abstractmethod
    def get_initial_rating(self) -> float:
        """获取初始评分"""
        pass

    @abstractmethod
    def get_expected_score(
        self,
        rating_a: float,
        rating_b: float
    ) -> float:
        """计算期望得分"""
        pass

    @abstractmethod
    def apply_match_result(
        self,
        team1_ratings: Sequence[float],
        team2_ratings: Sequence[float],
        team1_won: bool
    ) -> MatchRatingResult:
        """根据比赛结果计算两队四名球员的新评分"""
        pass


class DoublesEloRatingAlgorithm(RatingAlgorithm):
    """双打ELO评分算法: 以队伍平均分计算期望胜率，同队两人共享同一分差"""

    def __init__(
        self,
        init_rating: float = INITIAL_RATING,
        k_factor: float = K_FACTOR,
        logistic_constant: float = LOGISTIC_CONSTANT
    ):
        self.init_rating = init_rating
        self.k_factor = k_factor
        self.logistic_constant = logistic_constant

    def get_initial_rating(self) -> float:
        """获取初始评分"""
        return self.init_rating

    def get_expected_score(
        self,
        rating_a: float,
        rating_b: float
    ) -> float:
        """
        计算期望得分

        使用逻辑函数计算A对B的期望胜率，满足 E(a, b) + E(b, a) == 1

        公式: E_a = 1 / (1 + 10^((R_b - R_a) / logistic_constant))
        """
        return 1 / (1 + 10 ** ((rating_b - rating_a) / self.logistic_constant))

    def get_team_rating(self, player1_rating: float, player2_rating: float) -> float:
        """队伍评分：两名球员评分的算术平均"""
        return (player1_rating + player2_rating) / 2

    def apply_match_result(
        self,
        team1_ratings: Sequence[float],
        team2_ratings: Sequence[float],
        team1_won: bool
    ) -> MatchRatingResult:
        """双打ELO更新：delta = round(K * (actual - expected))，加到同队两人各自的原评分上"""
        if len(team1_ratings) != TEAM_SIZE or len(team2_ratings) != TEAM_SIZE:
            raise InvalidTeamSize(len(team1_ratings), len(team2_ratings))

        team1_rating = self.get_team_rating(team1_ratings[0], team1_ratings[1])
        team2_rating = self.get_team_rating(team2_ratings[0], team2_ratings[1])

        expected_1 = self.get_expected_score(team1_rating, team2_rating)
        expected_2 = 1 - expected_1

        if team1_won:
            actual_1, actual_2 = 1.0, 0.0
        else:
            actual_1, actual_2 = 0.0, 1.0

        team1_delta = round_half_up(self.k_factor * (actual_1 - expected_1))
        team2_delta = round_half_up(self.k_factor * (actual_2 - expected_2))

        return MatchRatingResult(
            team1_new_ratings=tuple(rating + team1_delta for rating in team1_ratings),
            team2_new_ratings=tuple(rating + team2_delta for rating in team2_ratings),
            team1_delta=team1_delta,
            team2_delta=team2_delta,
        )

    def get_win_probability(
        self,
        team1_ratings: Sequence[float],
        team2_ratings: Sequence[float]
    ) -> float:
        """计算队伍1战胜队伍2的概率"""
        if len(team1_ratings) != TEAM_SIZE or len(team2_ratings) != TEAM_SIZE:
            raise InvalidTeamSize(len(team1_ratings), len(team2_ratings))
        return self.get_expected_score(
            self.get_team_rating(*team1_ratings),
            self.get_team_rating(*team2_ratings),
        )


_default_algorithm = DoublesEloRatingAlgorithm()


def expected_score(rating_a: float, rating_b: float) -> float:
    """使用默认参数计算A对B的期望得分"""
    return _default_algorithm.get_expected_score(rating_a, rating_b)


def team_rating(player1_rating: float, player2_rating: float) -> float:
    return _default_algorithm.get_team_rating(player1_rating, player2_rating)


def apply_match_result(
    team1_ratings: Sequence[float],
    team2_ratings: Sequence[float],
    team1_won: bool
) -> MatchRatingResult:
    """使用默认参数（K=32）计算一场双打比赛后的评分变化"""
    return _default_algorithm.apply_match_result(team1_ratings, team2_ratings, team1_won)
