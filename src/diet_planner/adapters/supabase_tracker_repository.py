"""Supabase repository for diet trackers."""

from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from diet_planner.domain.plans import MacroTargets
from diet_planner.domain.trackers import (
    DailyTrackerRecord,
    DietTracker,
    MacroProgress,
    TrackerStatus,
)
from diet_planner.errors import ConcurrentUpdateError, DatabaseError
from diet_planner.services.trackers import TrackerRepository

_TABLE = "diet_trackers"
_COLUMNS = (
    "id, owner_id, plan_id, status, start_date, current_day, total_days, "
    "target_calories, target_macros, daily_trackers, "
    "overall_completion_percentage, streak, adherence_score, version, created_at"
)


@dataclass
class SupabaseTrackerRepository(TrackerRepository):
    """Supabase implementation for diet trackers."""

    client: Client

    def create_tracker(self, tracker: DietTracker) -> DietTracker:
        response = self.client.table(_TABLE).insert(_to_row(tracker)).execute()
        if not response.data:
            raise DatabaseError(
                "Failed to create diet tracker", {"plan_id": str(tracker.plan_id)}
            )
        return _parse_tracker(response.data[0])

    def get_tracker(self, tracker_id: UUID) -> DietTracker | None:
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("id", str(tracker_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_tracker(response.data[0])

    def find_active_tracker(
        self, owner_id: UUID, plan_id: UUID | None = None
    ) -> DietTracker | None:
        query = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("owner_id", str(owner_id))
            .eq("status", TrackerStatus.ACTIVE.value)
        )
        if plan_id is not None:
            query = query.eq("plan_id", str(plan_id))
        response = query.order("created_at", desc=True).limit(1).execute()
        if not response.data:
            return None
        return _parse_tracker(response.data[0])

    def list_trackers(self, owner_id: UUID) -> list[DietTracker]:
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("owner_id", str(owner_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_tracker(row) for row in response.data or []]

    def update_tracker(
        self, tracker: DietTracker, expected_version: int
    ) -> DietTracker:
        """Write the tracker only if the stored version still matches."""
        row = _to_row(replace(tracker, version=expected_version + 1))
        row["updated_at"] = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table(_TABLE)
            .update(row)
            .eq("id", str(tracker.id))
            .eq("version", expected_version)
            .execute()
        )
        if not response.data:
            raise ConcurrentUpdateError(
                "Diet tracker was modified concurrently",
                {"tracker_id": str(tracker.id), "expected_version": expected_version},
            )
        return _parse_tracker(response.data[0])


def _to_row(tracker: DietTracker) -> dict[str, object]:
    return {
        "id": str(tracker.id),
        "owner_id": str(tracker.owner_id),
        "plan_id": str(tracker.plan_id),
        "status": tracker.status.value,
        "start_date": tracker.start_date.isoformat(),
        "current_day": tracker.current_day,
        "total_days": tracker.total_days,
        "target_calories": tracker.target_calories,
        "target_macros": {
            "protein": tracker.target_macros.protein,
            "carbs": tracker.target_macros.carbs,
            "fat": tracker.target_macros.fat,
        },
        "daily_trackers": [
            _record_to_payload(record)
            for _, record in sorted(tracker.daily_trackers.items())
        ],
        "overall_completion_percentage": tracker.overall_completion_percentage,
        "streak": tracker.streak,
        "adherence_score": tracker.adherence_score,
        "version": tracker.version,
        "created_at": tracker.created_at.isoformat() if tracker.created_at else None,
    }


def _record_to_payload(record: DailyTrackerRecord) -> dict[str, object]:
    return {
        "day_number": record.day_number,
        "date": record.date.isoformat(),
        "completed_meals": record.completed_meals,
        "total_meals": record.total_meals,
        "completion_percentage": record.completion_percentage,
        "calories_consumed": record.calories_consumed,
        "target_calories": record.target_calories,
        "nutrition": {
            name: {"consumed": macro.consumed, "target": macro.target}
            for name, macro in (
                ("protein", record.protein),
                ("carbs", record.carbs),
                ("fat", record.fat),
            )
        },
    }


def _parse_record(raw: dict[str, object]) -> DailyTrackerRecord:
    nutrition = raw.get("nutrition") or {}

    def macro(name: str) -> MacroProgress:
        values = nutrition.get(name) or {}
        return MacroProgress(
            consumed=float(values.get("consumed", 0.0)),
            target=float(values.get("target", 0.0)),
        )

    return DailyTrackerRecord(
        day_number=int(raw["day_number"]),
        date=date.fromisoformat(str(raw["date"])),
        completed_meals=int(raw.get("completed_meals", 0)),
        total_meals=int(raw.get("total_meals", 0)),
        completion_percentage=int(raw.get("completion_percentage", 0)),
        calories_consumed=float(raw.get("calories_consumed", 0.0)),
        target_calories=float(raw.get("target_calories", 0.0)),
        protein=macro("protein"),
        carbs=macro("carbs"),
        fat=macro("fat"),
    )


def _parse_tracker(row: dict[str, object]) -> DietTracker:
    macros = row.get("target_macros") or {}
    records = [_parse_record(raw) for raw in row.get("daily_trackers") or []]
    created_at = row.get("created_at")
    return DietTracker(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["owner_id"])),
        plan_id=UUID(str(row["plan_id"])),
        status=TrackerStatus(row.get("status", TrackerStatus.ACTIVE.value)),
        start_date=date.fromisoformat(str(row["start_date"])[:10]),
        current_day=int(row.get("current_day", 1)),
        total_days=int(row["total_days"]),
        target_calories=int(row.get("target_calories", 0)),
        target_macros=MacroTargets(
            protein=int(macros.get("protein", 0)),
            carbs=int(macros.get("carbs", 0)),
            fat=int(macros.get("fat", 0)),
        ),
        daily_trackers={record.day_number: record for record in records},
        overall_completion_percentage=int(row.get("overall_completion_percentage", 0)),
        streak=int(row.get("streak", 0)),
        adherence_score=int(row.get("adherence_score", 0)),
        version=int(row.get("version", 1)),
        created_at=datetime.fromisoformat(created_at) if created_at else None,
    )
