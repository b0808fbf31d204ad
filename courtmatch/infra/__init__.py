"""基础设施: 配置管理与排赛引擎"""
