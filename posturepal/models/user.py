from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from posturepal.core.database import Base


DEFAULT_SETTINGS = {
    "reminder_interval": 15,  # minutes
    "sensitivity": 0.7,
    "enable_reminders": True,
    "enable_camera": True,
}


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_active = Column(DateTime(timezone=True), server_default=func.now())

    profile = relationship("UserProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    settings = relationship("UserSettings", back_populates="user", uselist=False, cascade="all, delete-orphan")
    sessions = relationship("PostureSession", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class UserProfile(Base):
    """
    Onboarding profile. One per account.
    """
    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    name = Column(String(255), nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(String(20), nullable=True)  # male, female, other
    height = Column(Float, nullable=True)  # cm
    weight = Column(Float, nullable=True)  # kg
    fitness_goal = Column(String(50), default="posture_correction")  # strength, flexibility, posture_correction, endurance
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<UserProfile(user_id={self.user_id}, goal={self.fitness_goal})>"


class UserSettings(Base):
    """
    Tracking preferences. One per account, created lazily on first update.
    """
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    reminder_interval = Column(Integer, nullable=False, default=DEFAULT_SETTINGS["reminder_interval"])
    sensitivity = Column(Float, nullable=False, default=DEFAULT_SETTINGS["sensitivity"])
    enable_reminders = Column(Boolean, nullable=False, default=DEFAULT_SETTINGS["enable_reminders"])
    enable_camera = Column(Boolean, nullable=False, default=DEFAULT_SETTINGS["enable_camera"])
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="settings")

    def __repr__(self):
        return f"<UserSettings(user_id={self.user_id}, interval={self.reminder_interval})>"
