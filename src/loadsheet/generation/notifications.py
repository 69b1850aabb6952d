"""Validation of loadsheet notifications pushed by the backend.

The backend publishes generated loadsheets as JSON on a telemetry key. The
payload is validated against a schema before anything downstream sees it;
a malformed payload becomes a parse failure, never partially-typed data.

Typical usage example:
    from loadsheet.generation.notifications import parse_notification

    parsed = parse_notification(raw_payload)
    if parsed.ok:
        render(parsed.data)
    else:
        logger.warning("Dropped notification: %s", parsed.error)
"""

from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from loadsheet.weight_balance.engine import ZONES
from loadsheet.weight_balance.models import LoadsheetData


class LoadsheetPayload(BaseModel):
    """Schema of a loadsheet notification.

    Field names are camelCase on the wire; snake_case names are accepted too.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    zero_fuel_weight: float = Field(alias="zeroFuelWeight", ge=0)
    zero_fuel_weight_cg: float = Field(alias="zeroFuelWeightCG")
    zero_fuel_weight_mac: float = Field(alias="zeroFuelWeightMac")
    takeoff_weight: float = Field(alias="takeoffWeight", ge=0)
    takeoff_weight_cg: float = Field(alias="takeoffWeightCG")
    takeoff_weight_mac: float = Field(alias="takeoffWeightMac")
    fuel_weight: float = Field(alias="fuelWeight", ge=0)
    landing_weight: float = Field(alias="landingWeight", ge=0)
    total_passengers: int = Field(alias="totalPassengers", ge=0)
    passengers_by_zone: dict[int, Annotated[int, Field(ge=0)]] = Field(alias="passengersByZone")
    forward_cargo_weight: float = Field(default=0.0, alias="forwardCargoWeight", ge=0)
    aft_cargo_weight: float = Field(default=0.0, alias="aftCargoWeight", ge=0)
    fuel_by_tank: dict[str, float] = Field(default_factory=dict, alias="fuelByTank")

    @model_validator(mode="after")
    def check_zone_total(self) -> "LoadsheetPayload":
        if set(self.passengers_by_zone) != set(ZONES):
            raise ValueError(
                f"passengers by zone must list zones {list(ZONES)}, "
                f"got {sorted(self.passengers_by_zone)}"
            )
        zone_total = sum(self.passengers_by_zone.values())
        if zone_total != self.total_passengers:
            raise ValueError(
                f"passengers by zone sum to {zone_total}, "
                f"expected {self.total_passengers}"
            )
        return self

    def to_loadsheet_data(self) -> LoadsheetData:
        return LoadsheetData(
            zero_fuel_weight=self.zero_fuel_weight,
            zero_fuel_weight_cg=self.zero_fuel_weight_cg,
            zero_fuel_weight_mac=self.zero_fuel_weight_mac,
            takeoff_weight=self.takeoff_weight,
            takeoff_weight_cg=self.takeoff_weight_cg,
            takeoff_weight_mac=self.takeoff_weight_mac,
            fuel_weight=self.fuel_weight,
            landing_weight=self.landing_weight,
            total_passengers=self.total_passengers,
            passengers_by_zone=dict(self.passengers_by_zone),
            forward_cargo_weight=self.forward_cargo_weight,
            aft_cargo_weight=self.aft_cargo_weight,
            fuel_by_tank=dict(self.fuel_by_tank),
        )


@dataclass(frozen=True)
class ParsedNotification:
    """Outcome of parsing a notification: data on success, error otherwise."""

    data: LoadsheetData | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.data is not None


def parse_notification(raw_payload: Any) -> ParsedNotification:
    """Validate a raw notification payload.

    Args:
        raw_payload: JSON text (str or bytes) or an already decoded mapping.

    Returns:
        ParsedNotification carrying LoadsheetData, or the validation error.
    """
    try:
        if isinstance(raw_payload, (str, bytes, bytearray)):
            payload = LoadsheetPayload.model_validate_json(raw_payload)
        elif isinstance(raw_payload, dict):
            payload = LoadsheetPayload.model_validate(raw_payload)
        else:
            kind = type(raw_payload).__name__
            return ParsedNotification(error=f"Unsupported payload type: {kind}")
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(part) for part in first["loc"])
        message = f"{where}: {first['msg']}" if where else first["msg"]
        return ParsedNotification(error=f"{e.error_count()} validation error(s): {message}")

    return ParsedNotification(data=payload.to_loadsheet_data())
