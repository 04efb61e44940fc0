"""LifeXP: gamification engine for a life-tracking app"""

__version__ = "0.1.0"
