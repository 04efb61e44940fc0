"""
Service Layer Package

Async services that sit between callers and the store interfaces:
- GamificationService: task completion, XP, achievements, goals
"""

from lifexp.services.gamification_service import GamificationService

__all__ = [
    "GamificationService",
]
