"""
courtmatch
双打轮次排赛与ELO评分引擎
"""

__version__ = "0.1.0"
