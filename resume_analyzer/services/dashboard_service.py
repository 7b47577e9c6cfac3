from typing import List

from resume_analyzer.models import AnalysisRecord, AnalysisStatus, DashboardSummary
from resume_analyzer.services.scoring_service import round_half_up

RECENT_LIMIT = 5

def summarize(records: List[AnalysisRecord], recent_limit: int = RECENT_LIMIT) -> DashboardSummary:
    """Summary stats over an owner's records, which must be newest first."""
    completed = [r.score for r in records if r.status == AnalysisStatus.COMPLETED]
    average_score = round_half_up(sum(completed) / len(completed)) if completed else 0

    return DashboardSummary(
        total_analyses=len(records),
        average_score=average_score,
        recent=records[:recent_limit],
    )

class DashboardService:
    def __init__(self, record_service):
        self.record_service = record_service

    def get_summary(self, owner_id: str) -> DashboardSummary:
        return summarize(self.record_service.list_analyses(owner_id))
