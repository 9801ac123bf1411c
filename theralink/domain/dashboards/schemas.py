"""Dashboard domain schemas"""

from pydantic import BaseModel


class AdminStatsResponse(BaseModel):
    users: int
    therapists: int
    friends: int
    clients: int
    admins: int
    appointments: int
    completed_appointments: int
    cancelled_appointments: int
    transactions: int
    total_revenue: float
    session_notes: int
    unread_feedback: int
    unread_contact_messages: int
    reviews: int
    average_rating: float
    pending_therapists: int
    pending_friends: int
    pending_approvals: int
    blogs: int
    published_blogs: int


class FriendStatsResponse(BaseModel):
    active_clients: int
    total_sessions: int
    unread_messages: int
    notes_count: int
