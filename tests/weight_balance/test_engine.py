"""Tests for the weight distribution engine."""

import random

import pytest

from loadsheet.core.errors import ComputationError, ConfigurationError, NotFoundError, ParseError
from loadsheet.weight_balance import (
    A320_CONSTANTS,
    CargoCapacities,
    FlightPlan,
    WeightDistributionEngine,
)

ZONES = [40, 40, 40, 60]
HOLDS = CargoCapacities(forward=2500, aft=2500)
EMPTY_WEIGHT = 42500.0


def zero_fuel_moment(data, empty_weight=EMPTY_WEIGHT):
    c = A320_CONSTANTS
    moment = empty_weight * c.operating_empty_cg
    for zone, count in data.passengers_by_zone.items():
        moment += count * c.passenger_weight * c.zone_arms[zone - 1]
    moment += data.forward_cargo_weight * c.forward_cargo_arm
    moment += data.aft_cargo_weight * c.aft_cargo_arm
    return moment


class TestPassengerDistribution:
    """Test passenger allocation over cabin zones."""

    @pytest.mark.parametrize("passengers", [0, 1, 7, 75, 150, 179, 180, 200])
    @pytest.mark.parametrize("seed", range(10))
    def test_zone_sum_matches_plan(self, passengers: int, seed: int) -> None:
        """Test that zone counts always add up to the planned passengers."""
        engine = WeightDistributionEngine(seed=seed)
        plan = FlightPlan(passengers=passengers, cargo_total=0, fuel=5000)

        data = engine.compute_preliminary(plan, ZONES, HOLDS, EMPTY_WEIGHT)

        assert sum(data.passengers_by_zone.values()) == passengers
        assert data.total_passengers == passengers
        assert set(data.passengers_by_zone) == {1, 2, 3, 4}

    @pytest.mark.parametrize(
        "capacities, passengers",
        [
            ([60, 60, 60, 1], 181),
            ([60, 60, 60, 1], 170),
            ([90, 90, 1, 0], 181),
            ([1, 1, 1, 120], 100),
            ([5, 80, 80, 2], 160),
        ],
    )
    @pytest.mark.parametrize("seed", range(50))
    def test_lopsided_cabin_never_negative(
        self, capacities: list[int], passengers: int, seed: int
    ) -> None:
        """Test that uneven cabins never produce a negative zone count."""
        engine = WeightDistributionEngine(seed=seed)
        plan = FlightPlan(passengers=passengers, cargo_total=0, fuel=5000)

        data = engine.compute_preliminary(plan, capacities, HOLDS, EMPTY_WEIGHT)

        assert all(count >= 0 for count in data.passengers_by_zone.values())
        assert sum(data.passengers_by_zone.values()) == passengers

    def test_small_last_zone_seed_23(self) -> None:
        """Test the full cabin with a one-seat last zone under seed 23."""
        engine = WeightDistributionEngine(seed=23)
        plan = FlightPlan(passengers=181, cargo_total=0, fuel=5000)

        data = engine.compute_preliminary(plan, [60, 60, 60, 1], HOLDS, EMPTY_WEIGHT)

        assert data.passengers_by_zone[4] >= 0
        assert sum(data.passengers_by_zone.values()) == 181

    def test_zero_capacity_rejected(self) -> None:
        """Test that a cabin without seats is a configuration error."""
        engine = WeightDistributionEngine(seed=1)
        plan = FlightPlan(passengers=10, cargo_total=0, fuel=5000)

        with pytest.raises(ConfigurationError):
            engine.compute_preliminary(plan, [0, 0, 0, 0], HOLDS, EMPTY_WEIGHT)

    def test_wrong_zone_count_rejected(self) -> None:
        """Test that exactly four zone capacities are required."""
        engine = WeightDistributionEngine(seed=1)
        plan = FlightPlan(passengers=10, cargo_total=0, fuel=5000)

        with pytest.raises(ConfigurationError):
            engine.compute_preliminary(plan, [60, 60, 60], HOLDS, EMPTY_WEIGHT)

    def test_same_seed_same_estimate(self) -> None:
        """Test that estimates are reproducible under a fixed seed."""
        plan = FlightPlan(passengers=150, cargo_total=2000, fuel=6000)

        first = WeightDistributionEngine(seed=42).compute_preliminary(plan, ZONES, HOLDS, EMPTY_WEIGHT)
        second = WeightDistributionEngine(seed=42).compute_preliminary(
            plan, ZONES, HOLDS, EMPTY_WEIGHT
        )

        assert first == second

    def test_injected_rng_is_used(self) -> None:
        """Test that an injected random source takes precedence over the seed."""
        plan = FlightPlan(passengers=150, cargo_total=2000, fuel=6000)

        with_rng = WeightDistributionEngine(rng=random.Random(5), seed=99)
        with_seed = WeightDistributionEngine(seed=5)

        assert with_rng.compute_preliminary(
            plan, ZONES, HOLDS, EMPTY_WEIGHT
        ) == with_seed.compute_preliminary(plan, ZONES, HOLDS, EMPTY_WEIGHT)


class TestCargoAndFuel:
    """Test cargo and fuel allocation."""

    def test_reference_flight(self) -> None:
        """Test the 150 passenger, 2000 kg cargo, 6000 kg fuel flight."""
        engine = WeightDistributionEngine(seed=3)
        plan = FlightPlan(passengers=150, cargo_total=2000, fuel=6000)

        data = engine.compute_preliminary(plan, ZONES, HOLDS, EMPTY_WEIGHT)

        assert sum(data.passengers_by_zone.values()) == 150
        assert data.forward_cargo_weight + data.aft_cargo_weight == pytest.approx(2000.0)
        assert data.warnings == []

        tanks = data.fuel_by_tank
        assert sum(tanks.values()) == pytest.approx(6000.0, rel=0.02)
        assert tanks["Center"] == pytest.approx(2100.0, rel=0.021)
        assert tanks["Left"] == pytest.approx(1950.0, rel=0.021)
        assert tanks["Left"] == pytest.approx(tanks["Right"])
        assert tanks["Center"] / tanks["Left"] == pytest.approx(0.35 / 0.325)

    @pytest.mark.parametrize("seed", range(10))
    def test_forward_ratio_within_jitter(self, seed: int) -> None:
        """Test that the forward hold gets 42.5% to 47.5% of the cargo."""
        engine = WeightDistributionEngine(seed=seed)
        plan = FlightPlan(passengers=100, cargo_total=2000, fuel=6000)

        data = engine.compute_preliminary(plan, ZONES, HOLDS, EMPTY_WEIGHT)

        assert 850.0 <= data.forward_cargo_weight <= 950.0

    def test_cargo_over_capacity_is_clamped(self) -> None:
        """Test that excess cargo is clamped and recorded as a warning."""
        engine = WeightDistributionEngine(seed=1)
        plan = FlightPlan(passengers=100, cargo_total=6000, fuel=6000)

        data = engine.compute_preliminary(plan, ZONES, HOLDS, EMPTY_WEIGHT)

        assert data.forward_cargo_weight <= HOLDS.forward
        assert data.aft_cargo_weight <= HOLDS.aft
        assert data.cargo_weight == pytest.approx(HOLDS.total)
        assert len(data.warnings) == 1
        assert data.warnings[0].item == "cargo"
        assert data.warnings[0].requested == 6000
        assert data.warnings[0].capacity == 5000

    def test_small_aft_hold_overflows_forward(self) -> None:
        """Test that cargo the aft hold cannot take goes forward."""
        engine = WeightDistributionEngine(seed=1)
        plan = FlightPlan(passengers=100, cargo_total=3000, fuel=6000)

        data = engine.compute_preliminary(
            plan, ZONES, CargoCapacities(forward=2500, aft=1000), EMPTY_WEIGHT
        )

        assert data.aft_cargo_weight == pytest.approx(1000.0)
        assert data.forward_cargo_weight == pytest.approx(2000.0)
        assert data.warnings == []


class TestMassProperties:
    """Test weights, CG and MAC figures."""

    def test_cg_is_moment_over_weight(self) -> None:
        """Test ZFW and TOW CG against moments computed by hand."""
        engine = WeightDistributionEngine(seed=11)
        plan = FlightPlan(passengers=150, cargo_total=2000, fuel=6000)

        data = engine.compute_preliminary(plan, ZONES, HOLDS, EMPTY_WEIGHT)

        zfw_moment = zero_fuel_moment(data)
        fuel_moment = sum(
            weight * A320_CONSTANTS.tank_arm(tank) for tank, weight in data.fuel_by_tank.items()
        )
        assert data.zero_fuel_weight_cg == pytest.approx(zfw_moment / data.zero_fuel_weight)
        assert data.takeoff_weight_cg == pytest.approx(
            (zfw_moment + fuel_moment) / data.takeoff_weight
        )

    def test_weights_add_up(self) -> None:
        """Test ZFW, TOW and landing weight composition."""
        engine = WeightDistributionEngine(seed=11)
        plan = FlightPlan(passengers=150, cargo_total=2000, fuel=6000)

        data = engine.compute_preliminary(plan, ZONES, HOLDS, EMPTY_WEIGHT)

        assert data.zero_fuel_weight == pytest.approx(
            EMPTY_WEIGHT + 150 * 77.0 + data.cargo_weight
        )
        assert data.takeoff_weight == pytest.approx(data.zero_fuel_weight + data.fuel_weight)
        assert data.landing_weight == pytest.approx(
            data.zero_fuel_weight + data.fuel_weight * 0.85
        )

    def test_mac_figures_match_cg(self) -> None:
        """Test that MAC figures are the conversion of the CG figures."""
        engine = WeightDistributionEngine(seed=11)
        plan = FlightPlan(passengers=150, cargo_total=2000, fuel=6000)

        data = engine.compute_preliminary(plan, ZONES, HOLDS, EMPTY_WEIGHT)

        assert data.zero_fuel_weight_mac == pytest.approx(
            engine.convert_to_mac(data.zero_fuel_weight_cg)
        )
        assert data.takeoff_weight_mac == pytest.approx(engine.convert_to_mac(data.takeoff_weight_cg))

    def test_zero_weight_rejected(self) -> None:
        """Test that an empty aircraft without load has no CG."""
        engine = WeightDistributionEngine(seed=1)
        plan = FlightPlan(passengers=0, cargo_total=0, fuel=0)

        with pytest.raises(ComputationError):
            engine.compute_preliminary(plan, ZONES, HOLDS, empty_weight=0.0)


class TestConvertToMac:
    """Test CG to %MAC conversion."""

    def test_leading_edge_is_zero(self) -> None:
        """Test that the MAC leading edge is 0% MAC."""
        engine = WeightDistributionEngine()
        assert engine.convert_to_mac(A320_CONSTANTS.leading_edge_mac) == pytest.approx(0.0)

    def test_trailing_edge_is_hundred(self) -> None:
        """Test that one MAC aft of the leading edge is 100% MAC."""
        engine = WeightDistributionEngine()
        trailing_edge = A320_CONSTANTS.leading_edge_mac - A320_CONSTANTS.mac_size
        assert engine.convert_to_mac(trailing_edge) == pytest.approx(100.0)

    def test_linear_and_decreasing(self) -> None:
        """Test that %MAC decreases linearly as the CG moves forward."""
        engine = WeightDistributionEngine()
        cgs = [-12.0, -10.0, -8.0, -6.0]
        macs = [engine.convert_to_mac(cg) for cg in cgs]

        assert macs == sorted(macs, reverse=True)
        steps = [b - a for a, b in zip(macs, macs[1:])]
        expected = -100.0 * 2.0 / A320_CONSTANTS.mac_size
        assert steps == pytest.approx([expected] * 3)


class TestComputeFinal:
    """Test final figures from simulator readings."""

    def test_final_from_readings(self, a320_telemetry) -> None:
        """Test that final figures use the measured loads unchanged."""
        engine = WeightDistributionEngine(seed=1)

        data = engine.compute_final(a320_telemetry, planned_trip_fuel=3500.0)

        assert data.passengers_by_zone == {1: 35, 2: 32, 3: 33, 4: 50}
        assert data.total_passengers == 150
        assert data.forward_cargo_weight == 900.0
        assert data.aft_cargo_weight == 1100.0
        assert data.fuel_by_tank == {"Center": 2100.0, "Left": 1950.0, "Right": 1950.0}
        assert data.fuel_weight == pytest.approx(6000.0)
        assert data.zero_fuel_weight == pytest.approx(42500.0 + 150 * 77.0 + 2000.0)
        assert data.landing_weight == pytest.approx(data.takeoff_weight - 3500.0)
        assert data.zero_fuel_weight_cg == pytest.approx(
            zero_fuel_moment(data) / data.zero_fuel_weight
        )
        assert data.warnings == []

    def test_final_is_deterministic(self, a320_telemetry) -> None:
        """Test that final figures do not depend on the random source."""
        first = WeightDistributionEngine(seed=1).compute_final(a320_telemetry, 3500.0)
        second = WeightDistributionEngine(seed=2).compute_final(a320_telemetry, 3500.0)

        assert first == second

    def test_cargo_reading_over_capacity_clamped(self, a320_telemetry) -> None:
        """Test that a hold reading above capacity is clamped with a warning."""
        a320_telemetry.write("aircraft.cargo.aft.amount", 3000.0)
        engine = WeightDistributionEngine()

        data = engine.compute_final(a320_telemetry, planned_trip_fuel=3500.0)

        assert data.aft_cargo_weight == 2500.0
        assert [w.item for w in data.warnings] == ["cargo_aft"]

    def test_missing_reading(self, a320_telemetry) -> None:
        """Test that a missing telemetry key propagates as NotFoundError."""
        del a320_telemetry._values["aircraft.weight.empty"]
        engine = WeightDistributionEngine()

        with pytest.raises(NotFoundError):
            engine.compute_final(a320_telemetry, planned_trip_fuel=3500.0)

    def test_malformed_reading(self, a320_telemetry) -> None:
        """Test that a non-numeric reading is a parse error."""
        a320_telemetry.write("aircraft.fuel.center.amount.kg", "lots")
        engine = WeightDistributionEngine()

        with pytest.raises(ParseError):
            engine.compute_final(a320_telemetry, planned_trip_fuel=3500.0)

    def test_preliminary_from_telemetry(self, a320_telemetry) -> None:
        """Test that capacities and empty weight are read from telemetry."""
        engine = WeightDistributionEngine(seed=8)
        plan = FlightPlan(passengers=150, cargo_total=6000, fuel=6000)

        from_telemetry = engine.compute_preliminary_from_telemetry(plan, a320_telemetry)
        direct = WeightDistributionEngine(seed=8).compute_preliminary(
            plan, ZONES, HOLDS, EMPTY_WEIGHT
        )

        assert from_telemetry == direct
        assert from_telemetry.cargo_weight == pytest.approx(5000.0)
