"""TutorHub - educational administration backend.

Student gamification (points, experience, levels, leaderboards), events and
attendance, tutor rosters, board-meeting decision tracking, social content
planning, donor tracking, and reporting dashboards.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
