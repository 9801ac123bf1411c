import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base


def generate_id():
    """Generate a UUID primary key"""
    return str(uuid.uuid4())


class Profile(Base):
    """Every signed-in person: admin, therapist, friend or client"""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=generate_id)
    firebase_uid = Column(String(128), unique=True, index=True, nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), default="client", nullable=False, index=True)  # admin, therapist, friend, client
    profile_image_url = Column(String(500), nullable=True)
    phone = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    therapist = relationship("Therapist", back_populates="profile", uselist=False)


class Therapist(Base):
    __tablename__ = "therapists"

    # Shares its id with the owning profile
    id = Column(String(36), ForeignKey("profiles.id"), primary_key=True)
    bio = Column(Text, nullable=True)
    specialization = Column(String(255), nullable=True)
    years_experience = Column(Integer, default=0)
    hourly_rate = Column(Float, nullable=True)
    # List of {date, slots[]}; older rows hold the same list as a JSON-encoded string
    availability = Column(JSON, nullable=True)
    rating = Column(Float, default=0)
    languages = Column(JSON, default=list)
    therapy_approaches = Column(JSON, default=list)
    education = Column(Text, nullable=True)
    license_number = Column(String(100), nullable=True)
    license_type = Column(String(100), nullable=True)
    insurance_info = Column(Text, nullable=True)
    session_formats = Column(JSON, default=list)
    has_insurance = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_community_therapist = Column(Boolean, default=False, nullable=False)
    application_status = Column(String(20), default="pending", nullable=True)  # pending, approved, rejected
    preferred_currency = Column(String(3), default="USD")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    profile = relationship("Profile", back_populates="therapist")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    therapist_id = Column(String(36), ForeignKey("therapists.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)  # always start_time + 50 minutes
    session_type = Column(String(10), default="video", nullable=False)  # video, chat
    # scheduled, confirmed, completed, cancelled
    status = Column(String(20), default="scheduled", nullable=False, index=True)
    notes = Column(Text, nullable=True)
    client_notes = Column(Text, nullable=True)
    booking_request_id = Column(String(36), ForeignKey("booking_requests.id"), nullable=True)
    payment_id = Column(String(36), ForeignKey("transactions.id"), nullable=True)
    meeting_link = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class BookingRequest(Base):
    """A client's request for a session with a friend-role provider"""

    __tablename__ = "booking_requests"

    id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    therapist_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    requested_date = Column(DateTime, nullable=True)
    requested_time = Column(DateTime, nullable=True)
    session_type = Column(String(10), default="chat")
    status = Column(String(20), default="pending", nullable=False)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    client = relationship("Profile", foreign_keys=[client_id])


class BookingNote(Base):
    __tablename__ = "booking_notes"

    id = Column(String(36), primary_key=True, default=generate_id)
    therapist_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    booking_request_id = Column(String(36), ForeignKey("booking_requests.id"), nullable=False)
    title = Column(String(255), default="", nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=generate_id)
    sender_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    receiver_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class Transaction(Base):
    """Payment outcome reported by the checkout widget"""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    reference = Column(String(255), unique=True, index=True, nullable=False)
    amount = Column(Float, default=0, nullable=False)
    currency = Column(String(3), default="KES")
    status = Column(String(20), nullable=False)  # success, failed
    payment_method = Column(String(50), nullable=True)
    phone_number = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SessionNote(Base):
    __tablename__ = "session_notes"

    id = Column(String(36), primary_key=True, default=generate_id)
    appointment_id = Column(String(36), ForeignKey("appointments.id"), nullable=True)
    therapist_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=generate_id)
    therapist_id = Column(String(36), ForeignKey("therapists.id"), nullable=False)
    client_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class FriendDetails(Base):
    """Onboarding details a friend-role provider submits; missing row = pending approval"""

    __tablename__ = "friend_details"

    id = Column(String(36), primary_key=True, default=generate_id)
    profile_id = Column(String(36), ForeignKey("profiles.id"), unique=True, nullable=False)
    experience = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Blog(Base):
    __tablename__ = "blogs"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    published = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
