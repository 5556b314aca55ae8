import re
from collections import Counter
from datetime import date, datetime, timezone
from typing import Optional
from sqlmodel import Session
import uuid

from leadhive.dashboard.schemas import DashboardStats, SourceBar, StatusSlice
from leadhive.leads import service as leads_service
from leadhive.leads.models import DEFAULT_STATUS
from leadhive.pipelines import service as pipelines_service

WON_STATUS = "Payment Done"
HIGH_BUDGET_THRESHOLD = 80000
FALLBACK_COLOR = "#cbd5e1"

# Colors for statuses that have no stage definition (older or imported leads)
STATUS_COLORS = {
    "Enquiry": "#818cf8",
    "Contacted": "#fbbf24",
    "Call not answered": "#ef4444",
    "Quotation Sent": "#c084fc",
    "Payment Done": "#4ade80",
    "New": "#94a3b8",
    "Follow Up": "#f472b6",
    "Qualified": "#60a5fa",
}

FORM_SOURCE = re.compile(r"^(.+?)\s*\(Form\)$", re.IGNORECASE)
FORM_PREFIX_SOURCE = re.compile(r"^form:\s*(\w+)", re.IGNORECASE)


def source_platform(source: Optional[str]) -> str:
    """Platform name of a lead source, e.g. "Website (Form)" gives "Website"."""
    source = (source or "").strip() or "Direct"
    match = FORM_SOURCE.match(source)
    if match:
        return match.group(1).strip()
    match = FORM_PREFIX_SOURCE.match(source)
    if match:
        return match.group(1)
    return source

def get_dashboard_stats(
    session: Session,
    owner_id: uuid.UUID,
    pipeline_id: Optional[uuid.UUID] = None,
    today: Optional[date] = None
) -> DashboardStats:
    today = today or datetime.now(timezone.utc).date()
    leads = leads_service.get_leads(session, owner_id)

    total = len(leads)
    won = sum(1 for l in leads if l.status == WON_STATUS)
    conversion_rate = round(won / total * 100, 1) if total else 0.0

    colors = dict(STATUS_COLORS)
    for stage in pipelines_service.get_all_stages(session, owner_id):
        colors[stage.name] = stage.color

    chart_leads = leads if pipeline_id is None else [l for l in leads if l.pipeline_id == pipeline_id]
    status_counts = Counter(l.status or DEFAULT_STATUS for l in chart_leads)
    source_counts = Counter(source_platform(l.source) for l in leads)

    return DashboardStats(
        total_leads=total,
        potential_revenue=sum(l.budget or 0 for l in leads),
        conversion_rate=conversion_rate,
        new_leads=sum(
            1 for l in leads
            if l.created_at.year == today.year and l.created_at.month == today.month
        ),
        high_budget_leads=sum(1 for l in leads if (l.budget or 0) > HIGH_BUDGET_THRESHOLD),
        overdue_follow_ups=sum(1 for l in leads if l.next_follow_up and l.next_follow_up < today),
        status_distribution=[
            StatusSlice(name=name, value=count, color=colors.get(name, FALLBACK_COLOR))
            for name, count in status_counts.items()
        ],
        source_distribution=[SourceBar(name=name, leads=count) for name, count in source_counts.items()],
    )
