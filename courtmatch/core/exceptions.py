"""
自定义异常类别

集中管理排赛与评分引擎的所有业务异常，方便调用方统一处理
"""


class MatchmakingError(Exception):
    """所有排赛引擎异常的基类"""
    pass


# ============ 评分相关异常 ============

class InvalidTeamSize(MatchmakingError, ValueError):
    """双打评分更新时，每队必须恰好有 2 名球员"""
    def __init__(self, team1_size: int, team2_size: int):
        self.team1_size = team1_size
        self.team2_size = team2_size
        super().__init__(
            f"每队必须恰好有 2 名球员 (team1={team1_size}, team2={team2_size})"
        )


class InvalidMatchResult(MatchmakingError, ValueError):
    """比赛结果无法解析（比分非法或未指定胜方）"""
    pass


# ============ 排赛相关异常 ============

class InsufficientPlayers(MatchmakingError, ValueError):
    """球员池不足 4 人，无法生成任何双打比赛"""
    def __init__(self, player_count: int, minimum: int = 4):
        self.player_count = player_count
        self.minimum = minimum
        super().__init__(
            f"至少需要 {minimum} 名球员才能生成赛程，当前仅有 {player_count} 名"
        )


class DuplicatePlayerId(MatchmakingError, ValueError):
    """球员池中出现重复的球员ID"""
    def __init__(self, player_id: str):
        self.player_id = player_id
        super().__init__(f"球员ID重复: {player_id}")
