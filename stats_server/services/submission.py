import logging
from datetime import datetime

from sqlalchemy.orm import Session

from stats_server.models.submission import Submission
from stats_server.schemas.stats import SubmissionRequest

logger = logging.getLogger(__name__)


def record_submission(db: Session, payload: SubmissionRequest) -> Submission:
    """Insert or refresh the row for one installation."""
    submission = db.query(Submission).filter(Submission.unique_id == payload.unique_id).first()
    created = submission is None
    if created:
        submission = Submission(unique_id=payload.unique_id)
        db.add(submission)

    submission.php_version = payload.php_version
    submission.cms_version = payload.cms_version
    submission.db_type = payload.db_type
    submission.db_version = payload.db_version
    submission.server_os = payload.server_os
    submission.modified = datetime.utcnow()

    db.commit()
    db.refresh(submission)
    logger.info("%s submission %d", "Created" if created else "Updated", submission.id)
    return submission
