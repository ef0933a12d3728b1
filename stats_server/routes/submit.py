from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stats_server.db.session import get_db
from stats_server.schemas.stats import SubmissionRequest, SubmissionResponse
from stats_server.services.submission import record_submission

router = APIRouter(tags=["submit"])


@router.post("/submit", response_model=SubmissionResponse)
def submit(body: SubmissionRequest, db: Session = Depends(get_db)):
    record_submission(db, body)
    return {"data": {"message": "Data saved successfully"}}
