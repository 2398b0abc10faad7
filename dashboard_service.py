# dashboard_service.py
from sqlalchemy.orm import Session

import queries
from errors import NotFoundError

MONTHS = 12
CONFIDENCE_LEVELS = 11


def confidence_level(percentage: float) -> int:
    return min(CONFIDENCE_LEVELS - 1, max(0, int(percentage // 10)))


def build_statistics(reports) -> dict:
    """Aggregates one user's reports, given newest first."""
    monthly = [0] * MONTHS
    histogram = [0] * CONFIDENCE_LEVELS
    levels = []
    for r in reports:
        monthly[r.created_at.month - 1] += 1
        level = confidence_level(r.detection_result_percentage)
        histogram[level] += 1
        levels.append({"confidence": r.detection_result_percentage, "level": level})

    return {
        "totalPotholes": len(reports),
        "monthlyDetections": monthly,
        "userStats": {
            "totalReports": len(reports),
            "confidenceLevels": levels,
            "confidenceHistogram": histogram,
            "firstReport": reports[-1].created_at.isoformat() if reports else None,
            "lastReport": reports[0].created_at.isoformat() if reports else None,
        },
    }


class DashboardService:
    def get_dashboard(self, db: Session, user_id: str) -> dict:
        user = queries.query_get_user(db, user_id)
        if not user:
            raise NotFoundError("User not found")
        reports = queries.query_get_reports_for_user(db, user_id)
        return {
            "user": {"name": user.name, "email": user.email},
            "reports": [r.to_dict() for r in reports],
            "statistics": build_statistics(reports),
        }
