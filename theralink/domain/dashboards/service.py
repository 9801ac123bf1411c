"""Dashboard service - assembles flat statistics objects for the role dashboards"""

import logging

from sqlalchemy.orm import sessionmaker

from ...auth import SessionContext
from .aggregator import gather_stats
from .repository import DashboardRepository
from .schemas import AdminStatsResponse, FriendStatsResponse

logger = logging.getLogger(__name__)


class DashboardService:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self.repo = DashboardRepository()

    async def get_admin_stats(self) -> AdminStatsResponse:
        repo = self.repo
        results = await gather_stats(
            self.session_factory,
            {
                "users": repo.count_profiles,
                "therapists": lambda db: repo.count_profiles(db, "therapist"),
                "friends": lambda db: repo.count_profiles(db, "friend"),
                "clients": lambda db: repo.count_profiles(db, "client"),
                "admins": lambda db: repo.count_profiles(db, "admin"),
                "appointments": repo.count_appointments,
                "completed_appointments": lambda db: repo.count_appointments(db, "completed"),
                "cancelled_appointments": lambda db: repo.count_appointments(db, "cancelled"),
                "transactions": repo.successful_transactions,
                "session_notes": repo.count_session_notes,
                "unread_feedback": repo.count_unread_feedback,
                "unread_contact_messages": repo.count_unread_contact_messages,
                "reviews": repo.review_summary,
                "pending_therapists": repo.count_pending_therapists,
                "friend_details": repo.count_friend_details,
                "blogs": repo.count_blogs,
                "published_blogs": lambda db: repo.count_blogs(db, published_only=True),
            },
        )

        transactions, total_revenue = results.pop("transactions")
        reviews, average_rating = results.pop("reviews")
        # Friends without an onboarding row are still awaiting approval
        pending_friends = max(0, results["friends"] - results.pop("friend_details"))

        return AdminStatsResponse(
            **results,
            transactions=transactions,
            total_revenue=total_revenue,
            reviews=reviews,
            average_rating=average_rating,
            pending_friends=pending_friends,
            pending_approvals=results["pending_therapists"] + pending_friends,
        )

    async def get_friend_stats(self, context: SessionContext) -> FriendStatsResponse:
        provider_id = context.profile_id
        repo = self.repo
        results = await gather_stats(
            self.session_factory,
            {
                "active_clients": lambda db: repo.count_active_clients(db, provider_id),
                "total_sessions": lambda db: repo.count_completed_sessions(db, provider_id),
                "unread_messages": lambda db: repo.count_unread_messages(db, provider_id),
                "notes_count": lambda db: repo.count_booking_notes(db, provider_id),
            },
        )
        return FriendStatsResponse(**results)
