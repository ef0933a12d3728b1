from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stats_server.core.config import settings
from stats_server.core.dependencies import AuthorizedRaw
from stats_server.db.session import get_db
from stats_server.schemas.stats import StatsResponse
from stats_server.services.report import build_report
from stats_server.services.repository import StatsRepository

router = APIRouter(prefix="/stats", tags=["stats"])


def _render(db: Session, source: str, recent: bool, authorized_raw: bool) -> dict:
    return build_report(
        StatsRepository(db),
        source=source,
        recent=recent,
        authorized_raw=authorized_raw,
        cumulative_total=settings.FULL_TOTAL_CUMULATIVE,
    )


@router.get("", response_model=StatsResponse)
def get_all_stats(
    authorized_raw: AuthorizedRaw,
    db: Session = Depends(get_db),
    recent: bool = Query(False, description="Only installations updated recently"),
):
    return _render(db, "", recent, authorized_raw)


@router.get("/{source}", response_model=StatsResponse)
def get_source_stats(
    source: str,
    authorized_raw: AuthorizedRaw,
    db: Session = Depends(get_db),
    recent: bool = Query(False, description="Only installations updated recently"),
):
    return _render(db, source, recent, authorized_raw)
