"""
Posture Session API Router
Create, list, read and delete the caller's finished sessions
"""
import logging
import math
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from posturepal.core.config import settings
from posturepal.core.database import get_db
from posturepal.models import User, PostureSession, PostureIssue, ScoreSample
from posturepal.schemas import (
    SessionCreate,
    SessionEnvelope,
    SessionListResponse,
    SessionRangeResponse,
    SessionResponse,
    Pagination,
    MessageResponse,
)
from posturepal.schemas.posture import as_utc
from posturepal.services.session_tracker import derive_average_score
from posturepal.utils import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["Sessions"])


def _get_owned_session(db: Session, session_id: int, user_id: int) -> Optional[PostureSession]:
    return db.query(PostureSession).filter(
        PostureSession.id == session_id,
        PostureSession.user_id == user_id
    ).first()


@router.post("", response_model=SessionEnvelope, status_code=status.HTTP_201_CREATED)
async def create_session(
    session_data: SessionCreate,
    user_agent: Optional[str] = Header(None),
    sec_ch_ua_platform: Optional[str] = Header(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Store a finished session.

    The average score is recomputed from the score samples when any are
    sent; otherwise the submitted value (or the good-time share) is kept.
    """
    score_values = [sample.score for sample in session_data.scores]
    if score_values or session_data.average_score is None:
        average_score = derive_average_score(
            score_values, session_data.good_posture_time, session_data.total_time
        )
    else:
        average_score = session_data.average_score

    posture_session = PostureSession(
        user_id=current_user.id,
        start_time=session_data.start_time,
        end_time=session_data.end_time,
        total_time=session_data.total_time,
        good_posture_time=session_data.good_posture_time,
        average_score=average_score,
        user_agent=user_agent,
        platform=(sec_ch_ua_platform or "unknown").strip('"'),
        issues=[
            PostureIssue(
                type=issue.type.value,
                severity=issue.severity.value,
                message=issue.message,
                timestamp=as_utc(issue.timestamp),
            )
            for issue in session_data.issues
        ],
        scores=[
            ScoreSample(score=sample.score, timestamp=as_utc(sample.timestamp))
            for sample in session_data.scores
        ],
    )

    db.add(posture_session)
    db.commit()
    db.refresh(posture_session)

    logger.info(f"Stored session {posture_session.id} for user {current_user.id}")

    return SessionEnvelope(session=SessionResponse.model_validate(posture_session))


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List the caller's sessions, newest first.
    """
    query = db.query(PostureSession).filter(PostureSession.user_id == current_user.id)
    total = query.count()

    sessions = query.order_by(
        PostureSession.start_time.desc(),
        PostureSession.id.desc()
    ).offset((page - 1) * limit).limit(limit).all()

    return SessionListResponse(
        sessions=[SessionResponse.model_validate(s) for s in sessions],
        pagination=Pagination(
            total=total,
            page=page,
            limit=limit,
            pages=math.ceil(total / limit),
        ),
    )


@router.get("/range/{start_date}/{end_date}", response_model=SessionRangeResponse)
async def list_sessions_in_range(
    start_date: datetime,
    end_date: datetime,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List the caller's sessions that started within [start_date, end_date].
    """
    start_date, end_date = as_utc(start_date), as_utc(end_date)
    if end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must not be before start_date"
        )

    sessions = db.query(PostureSession).filter(
        PostureSession.user_id == current_user.id,
        PostureSession.start_time >= start_date,
        PostureSession.start_time <= end_date
    ).order_by(PostureSession.start_time.desc()).all()

    return SessionRangeResponse(sessions=[SessionResponse.model_validate(s) for s in sessions])


@router.get("/{session_id}", response_model=SessionEnvelope)
async def get_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get one of the caller's sessions.
    """
    posture_session = _get_owned_session(db, session_id, current_user.id)

    if not posture_session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )

    return SessionEnvelope(session=SessionResponse.model_validate(posture_session))


@router.delete("/{session_id}", response_model=MessageResponse)
async def delete_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete one of the caller's sessions.
    """
    posture_session = _get_owned_session(db, session_id, current_user.id)

    if not posture_session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )

    db.delete(posture_session)
    db.commit()

    return MessageResponse(message="Session deleted")
