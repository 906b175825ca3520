"""
Statistics and data management endpoints
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from posturepal.core.database import get_db
from posturepal.models import User, PostureSession, PostureIssue, ScoreSample
from posturepal.schemas import StatsResponse, StatsSummary, MessageResponse
from posturepal.services.stats_calculator import StatsCalculator, WEEK
from posturepal.utils import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Statistics"])


def aggregate_user_stats(db: Session, user_id: int, since: datetime = None) -> dict:
    """
    Run the session reduction inside the database.
    """
    query = db.query(
        func.count(PostureSession.id),
        func.sum(PostureSession.total_time),
        func.sum(PostureSession.good_posture_time),
        func.avg(PostureSession.average_score),
        func.max(PostureSession.average_score),
        func.min(PostureSession.average_score),
    ).filter(PostureSession.user_id == user_id)

    if since is not None:
        query = query.filter(PostureSession.start_time >= since)

    count, total_time, total_good, mean_score, best, worst = query.one()

    return StatsCalculator.summarize_totals(
        total_sessions=count,
        total_time=total_time,
        total_good_posture_time=total_good,
        mean_score=mean_score,
        best_score=best,
        worst_score=worst,
    )


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Aggregate statistics over all of the caller's sessions.
    """
    return StatsResponse(stats=StatsSummary(**aggregate_user_stats(db, current_user.id)))


@router.get("/stats/weekly", response_model=StatsResponse)
async def get_weekly_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Aggregate statistics over sessions started in the last 7 days.
    """
    since = datetime.now(timezone.utc) - WEEK
    return StatsResponse(stats=StatsSummary(**aggregate_user_stats(db, current_user.id, since=since)))


@router.delete("/data", response_model=MessageResponse)
async def delete_all_data(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete every session of the caller. Irreversible.
    """
    session_ids = select(PostureSession.id).where(PostureSession.user_id == current_user.id)

    # Bulk deletes bypass ORM cascades, so children go first
    db.query(PostureIssue).filter(PostureIssue.session_id.in_(session_ids)).delete(synchronize_session=False)
    db.query(ScoreSample).filter(ScoreSample.session_id.in_(session_ids)).delete(synchronize_session=False)
    deleted = db.query(PostureSession).filter(
        PostureSession.user_id == current_user.id
    ).delete(synchronize_session=False)
    db.commit()

    logger.info(f"Deleted {deleted} sessions for user {current_user.id}")

    return MessageResponse(message="All data deleted")
