"""TutorHub API routers, one per namespace.

- leaderboard: public, tutor and admin leaderboards, CSV export
- reports: admin participation, attendance and events reports (+ PDF)
- sociometric: classroom relationship analysis (+ PDF)
- meetings: board meetings and decision tracking
- donations: donor ledger
- social: social content planning
- events: events, participation, attendance sessions, check-in and tutor roster
- gamification: points, experience and transaction rollback
- periods: academic period administration
"""

from tutorhub.api.routers.donations import router as donations_router
from tutorhub.api.routers.events import router as events_router
from tutorhub.api.routers.gamification import router as gamification_router
from tutorhub.api.routers.leaderboard import router as leaderboard_router
from tutorhub.api.routers.meetings import router as meetings_router
from tutorhub.api.routers.periods import router as periods_router
from tutorhub.api.routers.reports import router as reports_router
from tutorhub.api.routers.social import router as social_router
from tutorhub.api.routers.sociometric import router as sociometric_router

__all__ = [
    "donations_router",
    "events_router",
    "gamification_router",
    "leaderboard_router",
    "meetings_router",
    "periods_router",
    "reports_router",
    "social_router",
    "sociometric_router",
]
