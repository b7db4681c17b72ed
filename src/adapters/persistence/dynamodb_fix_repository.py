from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass
from typing import Any, Mapping

from botocore.exceptions import BotoCoreError, ClientError

from src.adapters.aws import dynamodb_client
from src.app.ports.output import IFixRepository
from src.domain.exceptions import StorageFailure
from src.domain.models import (
    HistorySample,
    LocationFix,
    MotionState,
    OccupancyStatus,
    Position,
)


def _position_to_dict(p: Position) -> dict[str, float]:
    return {"latitude": p.latitude, "longitude": p.longitude, "altitude": p.altitude}


def _position_from_dict(raw: Mapping[str, Any]) -> Position:
    return Position(
        latitude=float(raw["latitude"]),
        longitude=float(raw["longitude"]),
        altitude=float(raw.get("altitude", 0.0)),
    )


def fix_to_dict(fix: LocationFix) -> dict[str, Any]:
    return {
        "vehicle_id": fix.vehicle_id,
        "device_handle": fix.device_handle,
        "position": _position_to_dict(fix.position),
        "accuracy": fix.accuracy,
        "speed": fix.speed,
        "heading": fix.heading,
        "motion_state": fix.motion_state.value,
        "smoothed": fix.smoothed,
        "observed_at": fix.observed_at,
        "trip_id": fix.trip_id,
        "route_id": fix.route_id,
        "direction_id": fix.direction_id,
        "occupancy_status": (
            fix.occupancy_status.value if fix.occupancy_status is not None else None
        ),
        "occupancy_percentage": fix.occupancy_percentage,
        "history": [
            {"position": _position_to_dict(s.position), "observed_at": s.observed_at}
            for s in fix.history
        ],
    }


def fix_from_dict(raw: Mapping[str, Any]) -> LocationFix:
    occupancy = raw.get("occupancy_status")
    heading = raw.get("heading")
    return LocationFix(
        vehicle_id=str(raw["vehicle_id"]),
        device_handle=raw.get("device_handle"),
        position=_position_from_dict(raw["position"]),
        accuracy=float(raw.get("accuracy", 5.0)),
        speed=float(raw.get("speed", 0.0)),
        heading=float(heading) if heading is not None else None,
        motion_state=MotionState(raw.get("motion_state", MotionState.STOPPED.value)),
        smoothed=bool(raw.get("smoothed", False)),
        observed_at=str(raw["observed_at"]),
        trip_id=raw.get("trip_id") or "",
        route_id=raw.get("route_id") or "",
        direction_id=raw.get("direction_id") or "",
        occupancy_status=OccupancyStatus(occupancy) if occupancy else None,
        occupancy_percentage=raw.get("occupancy_percentage"),
        history=tuple(
            HistorySample(
                position=_position_from_dict(s["position"]),
                observed_at=str(s["observed_at"]),
            )
            for s in raw.get("history", [])
        ),
    )


@dataclass(slots=True)
class DynamoDbFixRepository(IFixRepository):
    """Stores one current fix per bus in DynamoDB.

    The fix document is kept as a JSON string so floats round-trip exactly.

    Env vars:
      - DDB_FIXES_TABLE (default: bustrack-fixes)
      - ENDPOINT_URL (preferred for LocalStack)
      - AWS_REGION
    """

    table_name: str | None = None

    def _table(self) -> str:
        return self.table_name or os.getenv("DDB_FIXES_TABLE") or "bustrack-fixes"

    def load_current_fix(self, vehicle_id: str) -> LocationFix | None:
        try:
            resp = dynamodb_client().get_item(
                TableName=self._table(),
                Key={"vehicle_id": {"S": vehicle_id}},
                ConsistentRead=True,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageFailure(
                f"Failed to load fix for {vehicle_id}: {exc}"
            ) from exc

        item = resp.get("Item")
        if not item or "fix" not in item:
            return None
        return fix_from_dict(json.loads(item["fix"]["S"]))

    def upsert_fix(self, fix: LocationFix) -> None:
        now_ms = int(time.time() * 1000)
        try:
            dynamodb_client().put_item(
                TableName=self._table(),
                Item={
                    "vehicle_id": {"S": fix.vehicle_id},
                    "observed_at": {"S": fix.observed_at},
                    "updated_at_ms": {"N": str(now_ms)},
                    "fix": {"S": json.dumps(fix_to_dict(fix))},
                },
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageFailure(
                f"Failed to store fix for {fix.vehicle_id}: {exc}"
            ) from exc

    def list_current_fixes(self) -> tuple[LocationFix, ...]:
        out: list[LocationFix] = []
        try:
            paginator = dynamodb_client().get_paginator("scan")
            for page in paginator.paginate(TableName=self._table()):
                for item in page.get("Items", []):
                    if "fix" in item:
                        out.append(fix_from_dict(json.loads(item["fix"]["S"])))
        except (BotoCoreError, ClientError) as exc:
            raise StorageFailure(f"Failed to scan fixes: {exc}") from exc
        return tuple(out)
