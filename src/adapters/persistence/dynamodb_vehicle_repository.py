from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from botocore.exceptions import BotoCoreError, ClientError

from src.adapters.aws import dynamodb_client
from src.app.ports.output import IVehicleRepository
from src.domain.exceptions import (
    AlreadyAssigned,
    Conflict,
    OwnerAlreadyAssigned,
    StorageFailure,
    VehicleNotFound,
)
from src.domain.models import Vehicle

logger = logging.getLogger(__name__)


def _error_code(exc: ClientError) -> str | None:
    response = getattr(exc, "response", None)
    if not isinstance(response, dict):
        return None
    return response.get("Error", {}).get("Code")


def _vehicle_from_item(item: Mapping[str, Any]) -> Vehicle:
    handle = item.get("device_handle", {}).get("N")
    return Vehicle(
        vehicle_id=item["vehicle_id"]["S"],
        assigned=bool(item.get("assigned", {}).get("BOOL", False)),
        device_handle=int(handle) if handle is not None else None,
        owner_name=item.get("owner_name", {}).get("S"),
    )


def _vehicle_to_item(vehicle: Vehicle) -> dict[str, Any]:
    item: dict[str, Any] = {
        "vehicle_id": {"S": vehicle.vehicle_id},
        "assigned": {"BOOL": vehicle.assigned},
    }
    if vehicle.device_handle is not None:
        item["device_handle"] = {"N": str(vehicle.device_handle)}
    if vehicle.owner_name is not None:
        item["owner_name"] = {"S": vehicle.owner_name}
    return item


@dataclass(slots=True)
class DynamoDbVehicleRepository(IVehicleRepository):
    """Stores buses in DynamoDB, with claim items for held handles and owners.

    Assignment is a single transaction: put the handle claim and the owner
    claim if neither exists, and flip the bus to assigned if it is still
    unassigned. The handle table is the free-handle index shared by every
    process; the owner table backs lookups by owner name.

    Env vars:
      - DDB_VEHICLES_TABLE (default: bustrack-vehicles)
      - DDB_HANDLES_TABLE (default: bustrack-handles)
      - DDB_OWNERS_TABLE (default: bustrack-owners)
      - ENDPOINT_URL (preferred for LocalStack)
      - AWS_REGION
    """

    vehicles_table: str | None = None
    handles_table: str | None = None
    owners_table: str | None = None

    def _vehicles(self) -> str:
        return (
            self.vehicles_table
            or os.getenv("DDB_VEHICLES_TABLE")
            or "bustrack-vehicles"
        )

    def _handles(self) -> str:
        return (
            self.handles_table or os.getenv("DDB_HANDLES_TABLE") or "bustrack-handles"
        )

    def _owners(self) -> str:
        return self.owners_table or os.getenv("DDB_OWNERS_TABLE") or "bustrack-owners"

    def load_vehicle(self, vehicle_id: str) -> Vehicle:
        try:
            resp = dynamodb_client().get_item(
                TableName=self._vehicles(),
                Key={"vehicle_id": {"S": vehicle_id}},
                ConsistentRead=True,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageFailure(f"Failed to load vehicle {vehicle_id}: {exc}") from exc

        item = resp.get("Item")
        if not item:
            raise VehicleNotFound(vehicle_id)
        return _vehicle_from_item(item)

    def save_vehicle(self, vehicle: Vehicle) -> None:
        if not vehicle.assigned:
            self._put_unassigned(vehicle)
            return

        ddb = dynamodb_client()
        try:
            ddb.transact_write_items(
                TransactItems=[
                    {
                        "Put": {
                            "TableName": self._handles(),
                            "Item": {
                                "device_handle": {"N": str(vehicle.device_handle)},
                                "vehicle_id": {"S": vehicle.vehicle_id},
                                "owner_name": {"S": str(vehicle.owner_name)},
                            },
                            "ConditionExpression": "attribute_not_exists(device_handle)",
                        }
                    },
                    {
                        "Update": {
                            "TableName": self._vehicles(),
                            "Key": {"vehicle_id": {"S": vehicle.vehicle_id}},
                            "UpdateExpression": "SET #a = :t, #h = :h, #o = :o",
                            "ConditionExpression": (
                                "attribute_exists(vehicle_id) AND #a = :f"
                            ),
                            "ExpressionAttributeNames": {
                                "#a": "assigned",
                                "#h": "device_handle",
                                "#o": "owner_name",
                            },
                            "ExpressionAttributeValues": {
                                ":t": {"BOOL": True},
                                ":f": {"BOOL": False},
                                ":h": {"N": str(vehicle.device_handle)},
                                ":o": {"S": str(vehicle.owner_name)},
                            },
                        }
                    },
                    {
                        "Put": {
                            "TableName": self._owners(),
                            "Item": {
                                "owner_name": {"S": str(vehicle.owner_name)},
                                "vehicle_id": {"S": vehicle.vehicle_id},
                            },
                            "ConditionExpression": "attribute_not_exists(owner_name)",
                        }
                    },
                ]
            )
        except ClientError as exc:
            if _error_code(exc) != "TransactionCanceledException":
                raise StorageFailure(
                    f"Failed to assign {vehicle.vehicle_id}: {exc}"
                ) from exc
            self._raise_for_cancellation(vehicle, exc)
        except BotoCoreError as exc:
            raise StorageFailure(
                f"Failed to assign {vehicle.vehicle_id}: {exc}"
            ) from exc

    def _raise_for_cancellation(self, vehicle: Vehicle, exc: ClientError) -> None:
        reasons = [
            (r or {}).get("Code")
            for r in exc.response.get("CancellationReasons", []) or []
        ]
        handle_reason = reasons[0] if len(reasons) > 0 else None
        vehicle_reason = reasons[1] if len(reasons) > 1 else None
        owner_reason = reasons[2] if len(reasons) > 2 else None

        if vehicle_reason == "ConditionalCheckFailed":
            # Raises VehicleNotFound for an unknown id.
            self.load_vehicle(vehicle.vehicle_id)
            raise AlreadyAssigned(vehicle.vehicle_id) from exc
        if owner_reason == "ConditionalCheckFailed":
            raise OwnerAlreadyAssigned(str(vehicle.owner_name)) from exc
        if handle_reason == "ConditionalCheckFailed" or "TransactionConflict" in reasons:
            raise Conflict(
                f"Device handle {vehicle.device_handle} already held"
            ) from exc

        logger.warning(
            "Assignment transaction for %s cancelled: %s", vehicle.vehicle_id, reasons
        )
        raise StorageFailure(
            f"Assignment of {vehicle.vehicle_id} cancelled: {reasons}"
        ) from exc

    def _put_unassigned(self, vehicle: Vehicle) -> None:
        try:
            dynamodb_client().put_item(
                TableName=self._vehicles(),
                Item=_vehicle_to_item(vehicle),
                ConditionExpression="attribute_exists(vehicle_id) AND #a = :f",
                ExpressionAttributeNames={"#a": "assigned"},
                ExpressionAttributeValues={":f": {"BOOL": False}},
            )
        except ClientError as exc:
            if _error_code(exc) == "ConditionalCheckFailedException":
                self.load_vehicle(vehicle.vehicle_id)
                raise AlreadyAssigned(vehicle.vehicle_id) from exc
            raise StorageFailure(f"Failed to save {vehicle.vehicle_id}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageFailure(f"Failed to save {vehicle.vehicle_id}: {exc}") from exc

    def _scan(self, **kwargs: Any) -> Iterator[Mapping[str, Any]]:
        try:
            paginator = dynamodb_client().get_paginator("scan")
            for page in paginator.paginate(
                TableName=self._vehicles(), ConsistentRead=True, **kwargs
            ):
                yield from page.get("Items", [])
        except (BotoCoreError, ClientError) as exc:
            raise StorageFailure(f"Failed to scan vehicles: {exc}") from exc

    def list_vehicles(self, *, assigned: bool | None = None) -> tuple[Vehicle, ...]:
        kwargs: dict[str, Any] = {}
        if assigned is not None:
            kwargs = {
                "FilterExpression": "#a = :a",
                "ExpressionAttributeNames": {"#a": "assigned"},
                "ExpressionAttributeValues": {":a": {"BOOL": assigned}},
            }
        return tuple(_vehicle_from_item(item) for item in self._scan(**kwargs))

    def find_by_owner(self, owner_name: str) -> Vehicle | None:
        try:
            resp = dynamodb_client().get_item(
                TableName=self._owners(),
                Key={"owner_name": {"S": owner_name}},
                ConsistentRead=True,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageFailure(f"Failed to look up owner {owner_name}: {exc}") from exc

        item = resp.get("Item")
        if not item:
            return None
        return self.load_vehicle(item["vehicle_id"]["S"])

    def insert_if_absent(self, vehicle: Vehicle) -> bool:
        try:
            dynamodb_client().put_item(
                TableName=self._vehicles(),
                Item=_vehicle_to_item(vehicle),
                ConditionExpression="attribute_not_exists(vehicle_id)",
            )
        except ClientError as exc:
            if _error_code(exc) == "ConditionalCheckFailedException":
                return False
            raise StorageFailure(
                f"Failed to insert {vehicle.vehicle_id}: {exc}"
            ) from exc
        except BotoCoreError as exc:
            raise StorageFailure(
                f"Failed to insert {vehicle.vehicle_id}: {exc}"
            ) from exc
        return True
