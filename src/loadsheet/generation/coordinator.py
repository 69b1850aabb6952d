"""Loadsheet generation coordinator.

This module drives authoritative loadsheet generation on the backend: it
pushes the flight's inputs to the simulator, requests generation with
bounded retries, keeps one GenerationState per loadsheet type, and turns
backend notifications into LoadsheetReceived events.

Typical usage example:
    from loadsheet.generation import LoadsheetGenerationCoordinator, LoadsheetType

    coordinator = LoadsheetGenerationCoordinator(telemetry, backend, event_bus)
    coordinator.load_flight_plan(plan)
    result = await coordinator.generate_loadsheet(LoadsheetType.PRELIMINARY)
    if result.success:
        data = await coordinator.wait_for_loadsheet(LoadsheetType.PRELIMINARY)
"""

import asyncio
import json
import random
import time
from collections.abc import Awaitable, Callable
from typing import Any

from loadsheet.core.config import GenerationSettings, LoadsheetSettings
from loadsheet.core.errors import (
    ConfigurationError,
    NotFoundError,
    ParseError,
    TransientNetworkError,
    WriteError,
)
from loadsheet.core.event_bus import EventBus
from loadsheet.core.logging_system import get_logger
from loadsheet.generation.backend import BackendClient
from loadsheet.generation.events import LoadsheetReceived
from loadsheet.generation.inputs import (
    DEFAULT_SEAT_COUNT,
    FUEL_TARGET_KEY,
    PASSENGER_STATISTICS_KEY,
    PLANNED_CARGO_KEY,
    SEAT_MAP_KEY,
    build_seat_map,
    format_seat_map,
    fuel_target_payload,
    parse_fuel_target,
    passenger_statistics,
)
from loadsheet.generation.notifications import parse_notification
from loadsheet.generation.result import ErrorKind, LoadsheetResult
from loadsheet.generation.state import GenerationPhase, GenerationState, LoadsheetType
from loadsheet.telemetry import TelemetryProvider, read_int
from loadsheet.weight_balance.engine import ZONES, zone_capacity_key
from loadsheet.weight_balance.models import FlightPlan, LoadsheetData

logger = get_logger(__name__)

SleepFunction = Callable[[float], Awaitable[None]]


def _is_empty_payload(payload: Any) -> bool:
    if payload is None:
        return True
    if isinstance(payload, (str, bytes, bytearray)):
        return not payload.strip()
    if isinstance(payload, dict):
        return not payload
    return False


class LoadsheetGenerationCoordinator:
    """Coordinate loadsheet generation with the backend.

    Each loadsheet type has its own asyncio.Lock and GenerationState.
    Within a type, generation calls are strictly serialized: a call made
    while another is in flight waits for it and then sees its outcome, so
    a completed generation is never requested twice. Preliminary and final
    generation can run concurrently.

    Public operations report expected failures through LoadsheetResult or a
    bool; they do not raise.

    Examples:
        >>> coordinator = LoadsheetGenerationCoordinator(telemetry, BackendClient(url))
        >>> coordinator.load_flight_plan(FlightPlan(passengers=150, cargo_total=2000, fuel=6000))
        >>> result = asyncio.run(coordinator.generate_loadsheet(LoadsheetType.PRELIMINARY))
    """

    def __init__(
        self,
        telemetry: TelemetryProvider,
        backend: BackendClient,
        event_bus: EventBus | None = None,
        settings: GenerationSettings | None = None,
        request_timeout: float = 10.0,
        health_timeout: float = 5.0,
        rng: random.Random | None = None,
        sleep: SleepFunction | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the coordinator.

        Args:
            telemetry: Simulator variable access.
            backend: Backend HTTP client.
            event_bus: Bus receiving LoadsheetReceived events (optional).
            settings: Retry, polling and input settings.
            request_timeout: Per-attempt timeout of generation requests (seconds).
            health_timeout: Timeout of the health check (seconds).
            rng: Random source for the booked seat map.
            sleep: Awaitable used for backoff and polling waits. Defaults to a
                wait that ends early on shutdown.
            clock: Monotonic clock used for polling deadlines and rate limiting.

        Raises:
            ValueError: If telemetry or backend is missing.
        """
        if telemetry is None:
            raise ValueError("A telemetry provider is required")
        if backend is None:
            raise ValueError("A backend client is required")

        self.telemetry = telemetry
        self.backend = backend
        self.event_bus = event_bus
        self.settings = settings or GenerationSettings()
        self.request_timeout = request_timeout
        self.health_timeout = health_timeout
        self.rng = rng or random.Random()
        self._sleep = sleep
        self._clock = clock

        self._states: dict[LoadsheetType, GenerationState] = {
            t: GenerationState.not_started() for t in LoadsheetType
        }
        self._locks: dict[LoadsheetType, asyncio.Lock] = {t: asyncio.Lock() for t in LoadsheetType}
        self._subscribed: set[LoadsheetType] = set()
        self._last_attempt: dict[LoadsheetType, float] = {}
        self._shutdown = asyncio.Event()
        self.flight_plan: FlightPlan | None = None

    @classmethod
    def from_settings(
        cls,
        settings: LoadsheetSettings,
        telemetry: TelemetryProvider,
        event_bus: EventBus | None = None,
    ) -> "LoadsheetGenerationCoordinator":
        """Build a coordinator and its backend client from loaded settings."""
        backend = BackendClient(settings.backend.base_url, timeout=settings.backend.request_timeout)
        return cls(
            telemetry,
            backend,
            event_bus=event_bus,
            settings=settings.generation,
            request_timeout=settings.backend.request_timeout,
            health_timeout=settings.backend.health_timeout,
            rng=random.Random(settings.estimation.seed),
        )

    def state(self, loadsheet_type: LoadsheetType) -> GenerationState:
        """Current generation state of a loadsheet type."""
        return self._states[loadsheet_type]

    def load_flight_plan(self, plan: FlightPlan) -> None:
        """Use a flight plan for subsequent generations.

        A plan with a different plan_id is a new flight: both loadsheet types
        return to NOT_STARTED.
        """
        previous = self.flight_plan
        self.flight_plan = plan

        if previous is not None and previous.plan_id != plan.plan_id:
            logger.info("New flight plan %s (was %s)", plan.plan_id, previous.plan_id)
            self.reset_states()
        else:
            logger.debug("Flight plan loaded: %s", plan)

    def reset_states(self) -> None:
        """Return both loadsheet types to NOT_STARTED."""
        for loadsheet_type in LoadsheetType:
            self._states[loadsheet_type] = GenerationState.not_started()
        self._last_attempt.clear()
        logger.info("Loadsheet generation states reset")

    def shutdown(self) -> None:
        """Abort pending backoff and polling waits.

        Generation calls in a backoff wait return a CANCELLED failure.
        """
        logger.info("Loadsheet coordinator shutting down")
        self._shutdown.set()

    @property
    def is_shut_down(self) -> bool:
        return self._shutdown.is_set()

    async def generate_loadsheet(
        self,
        loadsheet_type: LoadsheetType,
        max_retries: int | None = None,
        force: bool = False,
    ) -> LoadsheetResult:
        """Request generation of a loadsheet from the backend.

        Args:
            loadsheet_type: Loadsheet to generate.
            max_retries: Retries after the first attempt (default from settings).
            force: Generate even if this type already completed.

        Returns:
            Success, or a failure classified by ErrorKind.
        """
        if max_retries is None:
            max_retries = self.settings.max_retries

        async with self._locks[loadsheet_type]:
            if self._states[loadsheet_type].is_completed and not force:
                logger.info(
                    "%s loadsheet already generated for this flight, skipping",
                    loadsheet_type.value,
                )
                return LoadsheetResult.ok(f"{loadsheet_type.value} loadsheet already generated")

            if not self.backend.base_url:
                logger.error(
                    "Backend URL is empty, cannot generate %s loadsheet", loadsheet_type.value
                )
                return LoadsheetResult.failure(
                    ErrorKind.CONFIGURATION, "Backend URL is not configured"
                )

            plan = self.flight_plan
            if plan is None:
                logger.warning(
                    "No flight plan loaded, cannot generate %s loadsheet", loadsheet_type.value
                )
                return LoadsheetResult.failure(ErrorKind.PRECONDITION, "No flight plan loaded")

            fuel_target = self._read_fuel_target()
            if fuel_target <= 0:
                logger.warning(
                    "Fuel target not set, cannot generate %s loadsheet", loadsheet_type.value
                )
                return LoadsheetResult.failure(ErrorKind.PRECONDITION, "Fuel target is not set")

            self._states[loadsheet_type] = GenerationState.generating()
            logger.info(
                "Generating %s loadsheet (max %d retries, force=%s)",
                loadsheet_type.value,
                max_retries,
                force,
            )

            try:
                return await self._generate(loadsheet_type, plan, fuel_target, max_retries)
            finally:
                if self._states[loadsheet_type].phase is GenerationPhase.GENERATING:
                    logger.warning("%s loadsheet generation interrupted", loadsheet_type.value)
                    self._states[loadsheet_type] = GenerationState.failed(
                        "Generation interrupted"
                    )

    async def _generate(
        self,
        loadsheet_type: LoadsheetType,
        plan: FlightPlan,
        fuel_target: float,
        max_retries: int,
    ) -> LoadsheetResult:
        try:
            self._push_inputs(plan, fuel_target)
        except (WriteError, ValueError) as e:
            logger.error("Failed to prepare %s loadsheet inputs: %s", loadsheet_type.value, e)
            return self._inputs_failed(loadsheet_type, e)
        except Exception as e:
            logger.exception("Unexpected error preparing %s loadsheet inputs", loadsheet_type.value)
            return self._inputs_failed(loadsheet_type, e)

        try:
            result = await self._request_generation(loadsheet_type, max_retries)
        except Exception as e:
            logger.exception("Unexpected error generating %s loadsheet", loadsheet_type.value)
            result = LoadsheetResult.failure(ErrorKind.PERMANENT_SERVER, f"Unexpected error: {e}")

        if not result.success:
            self._states[loadsheet_type] = GenerationState.failed(result.message)
            return result

        self._states[loadsheet_type] = GenerationState.completed()
        try:
            self._subscribe(loadsheet_type)
        except Exception:
            logger.exception("Could not subscribe to %s", loadsheet_type.notification_key)
        return result

    def _inputs_failed(self, loadsheet_type: LoadsheetType, error: Exception) -> LoadsheetResult:
        message = f"Failed to prepare loadsheet inputs: {error}"
        self._states[loadsheet_type] = GenerationState.failed(message)
        return LoadsheetResult.failure(ErrorKind.PRECONDITION, message)

    async def generate_with_preflight(
        self, loadsheet_type: LoadsheetType, force: bool = False
    ) -> LoadsheetResult:
        """Generate after the rate limit and the backend health check pass.

        Args:
            loadsheet_type: Loadsheet to generate.
            force: Generate even if this type already completed.

        Returns:
            RATE_LIMITED if the previous attempt for this type is more recent
            than min_attempt_interval, UNAVAILABLE if the health check fails,
            otherwise the outcome of generate_loadsheet.
        """
        if self._states[loadsheet_type].is_completed and not force:
            return LoadsheetResult.ok(f"{loadsheet_type.value} loadsheet already generated")

        now = self._clock()
        interval = self.settings.min_attempt_interval
        last = self._last_attempt.get(loadsheet_type)
        if interval > 0 and last is not None and now - last < interval:
            wait = interval - (now - last)
            logger.warning(
                "%s loadsheet attempted %.1fs ago, next attempt allowed in %.1fs",
                loadsheet_type.value,
                now - last,
                wait,
            )
            return LoadsheetResult.failure(
                ErrorKind.RATE_LIMITED, f"Too soon to retry, wait {wait:.1f}s"
            )
        self._last_attempt[loadsheet_type] = now

        if not await self.check_server_status():
            return LoadsheetResult.failure(
                ErrorKind.UNAVAILABLE, "Loadsheet backend is not available"
            )

        return await self.generate_loadsheet(loadsheet_type, force=force)

    async def resend_loadsheet(self) -> bool:
        """Ask the backend to resend the current loadsheet. True iff 2xx."""
        return await self._simple_request("POST", "/loadsheet/resend", "Resend loadsheet", body={})

    async def reset_loadsheets(self) -> bool:
        """Clear loadsheets held by the backend. On success both types reset."""
        if await self._simple_request("DELETE", "/loadsheet", "Reset loadsheets"):
            self.reset_states()
            return True
        return False

    async def check_server_status(self) -> bool:
        """Check backend health. Never raises."""
        if not self.backend.base_url:
            logger.error("Backend URL is empty, cannot check server status")
            return False

        start = self._clock()
        try:
            response = await self.backend.request("GET", "/health", timeout=self.health_timeout)
        except Exception as e:
            logger.warning("Server status check failed: %s", e)
            return False

        logger.info(
            "Server check completed in %.0fms, status %d",
            (self._clock() - start) * 1000,
            response.status,
        )
        return response.ok

    def on_notification(
        self, loadsheet_type: LoadsheetType, raw_payload: Any
    ) -> LoadsheetData | None:
        """Handle a loadsheet pushed by the backend.

        Empty payloads are ignored. Malformed payloads are logged and dropped.
        A valid payload is published as LoadsheetReceived.

        Returns:
            The validated loadsheet data, or None if the payload was dropped.
        """
        if _is_empty_payload(raw_payload):
            logger.debug("Ignoring empty %s loadsheet notification", loadsheet_type.value)
            return None

        parsed = parse_notification(raw_payload)
        if parsed.data is None:
            logger.warning(
                "Dropped malformed %s loadsheet notification: %s",
                loadsheet_type.value,
                parsed.error,
            )
            return None

        logger.info(
            "Received %s loadsheet: ZFW %.0f kg, TOW %.0f kg, %d passengers",
            loadsheet_type.value,
            parsed.data.zero_fuel_weight,
            parsed.data.takeoff_weight,
            parsed.data.total_passengers,
        )

        if self.event_bus is not None:
            try:
                self.event_bus.publish(
                    LoadsheetReceived(loadsheet_type=loadsheet_type, data=parsed.data)
                )
            except Exception:
                logger.exception("Loadsheet listener failed for %s loadsheet", loadsheet_type.value)

        return parsed.data

    def is_loadsheet_available(self, loadsheet_type: LoadsheetType) -> bool:
        """Whether the backend has published this loadsheet."""
        try:
            payload = self.telemetry.read(loadsheet_type.notification_key)
        except NotFoundError:
            return False
        return not _is_empty_payload(payload)

    async def wait_for_loadsheet(
        self,
        loadsheet_type: LoadsheetType,
        timeout: float | None = None,
        poll_interval: float | None = None,
    ) -> LoadsheetData | None:
        """Poll until the backend publishes a valid loadsheet.

        Args:
            loadsheet_type: Loadsheet to wait for.
            timeout: Maximum wait in seconds (default from settings).
            poll_interval: Delay between polls in seconds (default from settings).

        Returns:
            The loadsheet data, dispatched through on_notification, or None on
            timeout or shutdown.
        """
        timeout = self.settings.availability_timeout if timeout is None else timeout
        poll_interval = self.settings.poll_interval if poll_interval is None else poll_interval
        deadline = self._clock() + timeout

        while True:
            if self.is_loadsheet_available(loadsheet_type):
                data = self.on_notification(
                    loadsheet_type, self.telemetry.read(loadsheet_type.notification_key)
                )
                if data is not None:
                    return data

            remaining = deadline - self._clock()
            if remaining <= 0:
                logger.warning(
                    "%s loadsheet not available after %.1fs", loadsheet_type.value, timeout
                )
                return None

            if not await self._wait(min(poll_interval, remaining)):
                return None

    def _read_fuel_target(self) -> float:
        try:
            return parse_fuel_target(self.telemetry.read(FUEL_TARGET_KEY))
        except NotFoundError:
            return 0.0
        except ParseError as e:
            logger.warning("Unreadable fuel target: %s", e)
            return 0.0

    def _cabin_seat_count(self) -> int:
        """Seats in the booked-seat map.

        The configured seat_count wins. Otherwise the cabin zone capacities
        are summed; when the simulator does not report them the default
        132-seat cabin is used.
        """
        if self.settings.seat_count is not None:
            return self.settings.seat_count

        try:
            seats = sum(read_int(self.telemetry, zone_capacity_key(z)) for z in ZONES)
        except (NotFoundError, ParseError) as e:
            logger.debug("Zone capacities unavailable (%s), using %d seats", e, DEFAULT_SEAT_COUNT)
            return DEFAULT_SEAT_COUNT
        return seats if seats > 0 else DEFAULT_SEAT_COUNT

    def _push_inputs(self, plan: FlightPlan, fuel_target: float) -> None:
        seats = build_seat_map(plan.passengers, self._cabin_seat_count(), self.rng)
        self.telemetry.write(SEAT_MAP_KEY, format_seat_map(seats))
        statistics = passenger_statistics(plan.passengers)
        self.telemetry.write(PASSENGER_STATISTICS_KEY, json.dumps(statistics))
        self.telemetry.write(PLANNED_CARGO_KEY, plan.cargo_total)
        self.telemetry.write(FUEL_TARGET_KEY, fuel_target_payload(fuel_target))

        logger.info(
            "Prepared loadsheet inputs: %d passengers, %.0f kg cargo, %.0f kg fuel",
            plan.passengers,
            plan.cargo_total,
            fuel_target,
        )

    async def _request_generation(
        self, loadsheet_type: LoadsheetType, max_retries: int
    ) -> LoadsheetResult:
        path = f"/loadsheet/generate?type={loadsheet_type.value}"
        attempts = max_retries + 1
        kind = ErrorKind.TRANSIENT_NETWORK
        reason = ""
        status: int | None = None
        body: str | None = None

        for attempt in range(attempts):
            if attempt > 0:
                delay = self.settings.backoff_delay(attempt)
                logger.warning(
                    "Retrying %s loadsheet in %.1fs (retry %d/%d)",
                    loadsheet_type.value,
                    delay,
                    attempt,
                    max_retries,
                )
                if not await self._wait(delay):
                    return self._cancelled(loadsheet_type)
            elif self._shutdown.is_set():
                return self._cancelled(loadsheet_type)

            try:
                response = await self.backend.request(
                    "POST", path, body={}, timeout=self.request_timeout
                )
            except TransientNetworkError as e:
                kind, reason, status, body = ErrorKind.TRANSIENT_NETWORK, str(e), None, None
                logger.warning(
                    "%s loadsheet attempt %d failed: %s", loadsheet_type.value, attempt + 1, e
                )
                continue
            except ConfigurationError as e:
                logger.error("Cannot generate %s loadsheet: %s", loadsheet_type.value, e)
                return LoadsheetResult.failure(ErrorKind.CONFIGURATION, str(e))
            except Exception as e:
                kind, status, body = ErrorKind.PERMANENT_SERVER, None, None
                reason = f"{type(e).__name__}: {e}"
                logger.exception(
                    "Unexpected error on %s loadsheet attempt %d", loadsheet_type.value, attempt + 1
                )
                continue

            logger.debug("Response status %d, body: %s", response.status, response.body)
            if response.ok:
                logger.info("%s loadsheet generation accepted", loadsheet_type.value)
                return LoadsheetResult.ok(
                    f"{loadsheet_type.value} loadsheet generation accepted",
                    status_code=response.status,
                )

            kind, status, body = ErrorKind.PERMANENT_SERVER, response.status, response.body
            reason = f"status {response.status}"
            logger.warning(
                "%s loadsheet attempt %d rejected with status %d",
                loadsheet_type.value,
                attempt + 1,
                response.status,
            )

        message = (
            f"Failed to generate {loadsheet_type.value} loadsheet "
            f"after {attempts} attempts: {reason}"
        )
        logger.error(message)
        return LoadsheetResult.failure(kind, message, status_code=status, raw_body=body)

    async def _simple_request(
        self, method: str, path: str, label: str, body: dict[str, Any] | None = None
    ) -> bool:
        if not self.backend.base_url:
            logger.error("Backend URL is empty: %s skipped", label)
            return False

        try:
            response = await self.backend.request(
                method, path, body=body, timeout=self.request_timeout
            )
        except Exception as e:
            logger.error("%s failed: %s", label, e)
            return False

        if response.ok:
            logger.info("%s succeeded", label)
            return True

        logger.error("%s failed with status %d", label, response.status)
        return False

    async def _wait(self, delay: float) -> bool:
        """Wait for delay seconds. Returns False if shutdown interrupted the wait."""
        if self._shutdown.is_set():
            return False

        if self._sleep is not None:
            await self._sleep(delay)
            return not self._shutdown.is_set()

        try:
            await asyncio.wait_for(self._shutdown.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False

    def _cancelled(self, loadsheet_type: LoadsheetType) -> LoadsheetResult:
        logger.warning("%s loadsheet generation cancelled by shutdown", loadsheet_type.value)
        return LoadsheetResult.failure(
            ErrorKind.CANCELLED, f"{loadsheet_type.value} loadsheet generation cancelled"
        )

    def _subscribe(self, loadsheet_type: LoadsheetType) -> None:
        if loadsheet_type in self._subscribed:
            return
        self.telemetry.subscribe(loadsheet_type.notification_key, self._on_telemetry_change)
        self._subscribed.add(loadsheet_type)
        logger.info("Subscribed to %s", loadsheet_type.notification_key)

    def _on_telemetry_change(self, key: str, value: Any) -> None:
        for loadsheet_type in LoadsheetType:
            if loadsheet_type.notification_key == key:
                self.on_notification(loadsheet_type, value)
                return
