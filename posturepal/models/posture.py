"""
Posture Session Database Models
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from posturepal.core.database import Base


class PostureSession(Base):
    """
    One finished tracking interval with its derived statistics
    """
    __tablename__ = "posture_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)

    # Totals in seconds
    total_time = Column(Integer, nullable=False, default=0)
    good_posture_time = Column(Integer, nullable=False, default=0)

    average_score = Column(Float, nullable=False, default=0)  # 0-100

    # Device that recorded the session
    user_agent = Column(String(500), nullable=True)
    platform = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="sessions")
    issues = relationship(
        "PostureIssue",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="PostureIssue.id",
    )
    scores = relationship(
        "ScoreSample",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ScoreSample.id",
    )

    __table_args__ = (
        Index("ix_posture_sessions_user_start", "user_id", "start_time"),
    )

    def __repr__(self):
        return f"<PostureSession(id={self.id}, user_id={self.user_id}, score={self.average_score})>"


class PostureIssue(Base):
    """
    Posture problem detected during a session
    """
    __tablename__ = "posture_issues"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("posture_sessions.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)  # forward_head, rounded_shoulders, leaning, slouching
    severity = Column(String(20), nullable=False)  # mild, moderate, severe
    message = Column(String(255), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    session = relationship("PostureSession", back_populates="issues")

    def __repr__(self):
        return f"<PostureIssue(session_id={self.session_id}, type={self.type}, severity={self.severity})>"


class ScoreSample(Base):
    """
    Periodic posture score recorded on each tick
    """
    __tablename__ = "score_samples"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("posture_sessions.id"), nullable=False, index=True)
    score = Column(Float, nullable=False)  # 0-100
    timestamp = Column(DateTime(timezone=True), nullable=False)

    session = relationship("PostureSession", back_populates="scores")

    def __repr__(self):
        return f"<ScoreSample(session_id={self.session_id}, score={self.score})>"
