"""TutorHub service layer.

Services take an ``AsyncSession`` and flush; the API routers commit.
- ReportService: weekly participation, attendance alerts, events overview
- SociometricService: classroom friend groups, leaders and isolation
- LeaderboardService: public, tutor, admin and weekly leaderboards
- DecisionService / MeetingService: board meetings and the decision kanban
- DonationService: donor ledger
- EventService: event registration, participation and session check-in
- StudentService: tutor rosters
- SocialService: social posts and content ingredients
- ReportPDFGenerator (services.pdf): WeasyPrint rendering, imported on demand
"""

from tutorhub.services.decisions import DecisionService
from tutorhub.services.donations import DonationService
from tutorhub.services.events import EventService
from tutorhub.services.leaderboard import LeaderboardService
from tutorhub.services.levels import LevelInfo, calculate_level_info
from tutorhub.services.meetings import MeetingService
from tutorhub.services.reports import ReportService
from tutorhub.services.social import SocialService
from tutorhub.services.sociometric import SociometricService
from tutorhub.services.students import StudentService

__all__ = [
    "DecisionService",
    "DonationService",
    "EventService",
    "LeaderboardService",
    "LevelInfo",
    "MeetingService",
    "ReportService",
    "SocialService",
    "SociometricService",
    "StudentService",
    "calculate_level_info",
]
