"""
Telemetry evaluation pipeline for FleetWatch.

This module coordinates validation, reading persistence and the
three evaluators (threshold, geofence, route deviation). Evaluators
run concurrently; their failures and their sink failures are logged
and absorbed so that ingestion itself never fails because of alerting.
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence, Set
from fleetwatch.core.errors import SinkError, ValidationError
from fleetwatch.core.geofence import GeofenceTracker, containing_geofences, evaluate_geofences
from fleetwatch.core.models import AlertDraft, Geofence, IngestResult, NotificationDraft, Reading, RouteCheck
from fleetwatch.core.normalize import to_expected_path, to_geofence
from fleetwatch.core.roles import Role
from fleetwatch.core.route import ROUTE_DEVIATION_M, evaluate_route_deviation
from fleetwatch.core.thresholds import FUEL_LOW_PCT, TEMP_HIGH_C, evaluate_thresholds
from fleetwatch.core.validation import validate_reading
from fleetwatch.ports.identity import IdentityPort
from fleetwatch.ports.roles import RoleLookupPort
from fleetwatch.ports.store import ALERTS, GEOFENCES, NOTIFICATIONS, READINGS, StorePort
from fleetwatch.observability import metrics
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.pipeline")


class TelemetryPipeline:
    """Validates, stores and evaluates one reading at a time"""

    def __init__(self,
                 store: StorePort,
                 roles: RoleLookupPort,
                 identity: Optional[IdentityPort] = None,
                 tracker: Optional[GeofenceTracker] = None,
                 *,
                 notify_roles: Sequence[Role] = (Role.ADMIN, Role.DISPATCHER),
                 temp_high_c: float = TEMP_HIGH_C,
                 fuel_low_pct: float = FUEL_LOW_PCT,
                 route_deviation_m: float = ROUTE_DEVIATION_M):
        """
        Args:
            store: durable store (alert / notification sink)
            roles: role lookup used to resolve geofence recipients
            identity: identity provider; when set, recipients unknown to it are skipped
            tracker: per-vehicle geofence state, a transition tracker by default
            notify_roles: roles receiving geofence notifications
            temp_high_c: high temperature threshold
            fuel_low_pct: low fuel threshold
            route_deviation_m: route deviation threshold (meters)
        """
        self.store = store
        self.roles = roles
        self.identity = identity
        self.tracker = tracker if tracker is not None else GeofenceTracker()
        self.notify_roles = list(notify_roles)
        self.temp_high_c = temp_high_c
        self.fuel_low_pct = fuel_low_pct
        self.route_deviation_m = route_deviation_m
        self._inflight: Set[asyncio.Task] = set()

        log.info(f"Pipeline created geofence_mode:{self.tracker.mode} "
                 f"notify_roles:{[r.value for r in self.notify_roles]}")

    async def ingest(self, raw: Dict[str, Any]) -> IngestResult:
        """
        Ingests one raw reading.

        Validation strictly precedes any write. Evaluation runs shielded
        so a disconnecting caller does not abort in-flight alert writes.

        Args:
            raw: decoded payload, optionally carrying expected_path

        Returns:
            IngestResult with the raised alerts, notifications and route classification

        Raises:
            ValidationError: the reading was rejected
            SinkError: the reading itself could not be stored
        """
        metrics.readings_received.inc()

        try:
            reading = validate_reading(raw)
        except ValidationError as e:
            metrics.readings_rejected.labels(reason=e.reason).inc()
            log.info(f"Reading rejected reason:{e.reason}")
            raise

        try:
            await self.store.insert(READINGS, reading.to_record())
        except SinkError as e:
            metrics.sink_failures.labels(table=READINGS).inc()
            log.error(f"Reading write failed vehicle:{reading.vehicle_id} error:{e}")
            raise
        metrics.readings_stored.inc()

        task = asyncio.ensure_future(self.evaluate(reading, raw.get("expected_path")))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return await asyncio.shield(task)

    async def evaluate(self, reading: Reading, expected_path: Any = None) -> IngestResult:
        """
        Runs the three evaluators concurrently for a validated reading.

        Args:
            reading: validated reading
            expected_path: GeoJSON LineString or [[lon, lat], ...]; None skips the route check
        """
        with metrics.evaluation_seconds.time():
            alerts, notifications, route = await asyncio.gather(
                self.run_thresholds(reading),
                self.run_geofences(reading),
                self.run_route(reading, expected_path),
            )

        if route is not None and route.alert is not None:
            alerts = alerts + [route.alert]

        return IngestResult(
            vehicle_id=reading.vehicle_id,
            alerts=alerts,
            notifications=notifications,
            deviated=route.deviated if route is not None else None,
        )

    async def drain(self) -> None:
        """Waits for shielded evaluations still running (shutdown)."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    # ---- threshold ----

    async def run_thresholds(self, reading: Reading) -> List[AlertDraft]:
        try:
            drafts = evaluate_thresholds(
                reading, temp_high_c=self.temp_high_c, fuel_low_pct=self.fuel_low_pct
            )
        except Exception as e:
            metrics.evaluator_errors.labels(evaluator="threshold").inc()
            log.error(f"Threshold evaluation failed vehicle:{reading.vehicle_id} error:{e}")
            return []

        await asyncio.gather(*(self._persist_alert(d) for d in drafts))
        return drafts

    # ---- geofence ----

    async def load_geofences(self) -> List[Geofence]:
        """Loads geofences fresh from the store, skipping malformed rows."""
        rows = await self.store.query(GEOFENCES)
        geofences: List[Geofence] = []
        for row in rows:
            try:
                geofences.append(to_geofence(row))
            except Exception as e:
                log.warning(f"Skipping malformed geofence id:{row.get('id')} error:{e}")
        return geofences

    async def run_geofences(self, reading: Reading) -> List[NotificationDraft]:
        try:
            geofences = await self.load_geofences()
        except Exception as e:
            metrics.evaluator_errors.labels(evaluator="geofence").inc()
            log.error(f"Geofence load failed vehicle:{reading.vehicle_id} error:{e}")
            return []

        containing = containing_geofences(reading, geofences)
        entered = self.tracker.entering(reading.vehicle_id, containing)
        if not entered:
            self._commit_geofence_state(reading.vehicle_id, containing)
            return []

        # Tracker state is committed only after recipients resolve
        try:
            candidates = await self.roles.users_with_roles(self.notify_roles)
        except Exception as e:
            metrics.evaluator_errors.labels(evaluator="geofence").inc()
            log.error(f"Recipient lookup failed vehicle:{reading.vehicle_id} error:{e}")
            return []

        recipients = [u for u in candidates if await self._recipient_known(u)]
        self._commit_geofence_state(reading.vehicle_id, containing)
        drafts = evaluate_geofences(reading, entered, recipients)

        await asyncio.gather(*(self._persist_notification(d) for d in drafts))
        return drafts

    def _commit_geofence_state(self, vehicle_id: str, containing: List[Geofence]) -> None:
        self.tracker.record(vehicle_id, containing)
        metrics.tracked_vehicles.set(len(self.tracker))

    async def _recipient_known(self, user_id: str) -> bool:
        if self.identity is None:
            return True
        try:
            return await self.identity.user_exists(user_id)
        except Exception as e:
            log.error(f"User lookup failed user_id:{user_id} error:{e}")
            return False

    # ---- route ----

    async def run_route(self, reading: Reading, expected_path: Any) -> Optional[RouteCheck]:
        if expected_path is None:
            return None

        try:
            path = to_expected_path(expected_path)
        except Exception as e:
            metrics.evaluator_errors.labels(evaluator="route").inc()
            log.error(f"Invalid expected path vehicle:{reading.vehicle_id} error:{e}")
            return RouteCheck(deviated=False)

        check = evaluate_route_deviation(reading, path, threshold_m=self.route_deviation_m)
        if check.deviated:
            metrics.route_deviations.inc()
            await self._persist_alert(check.alert)
        return check

    # ---- sink ----

    async def _persist_alert(self, draft: AlertDraft) -> bool:
        try:
            await self.store.insert(ALERTS, draft.to_record())
        except Exception as e:
            metrics.sink_failures.labels(table=ALERTS).inc()
            log.error(f"Alert write failed vehicle:{draft.vehicle_id} type:{draft.type} error:{e}")
            return False
        metrics.alerts_emitted.labels(type=draft.type, severity=draft.severity).inc()
        log.info(f"Alert raised vehicle:{draft.vehicle_id} type:{draft.type} severity:{draft.severity}")
        return True

    async def _persist_notification(self, draft: NotificationDraft) -> bool:
        try:
            await self.store.insert(NOTIFICATIONS, draft.to_record())
        except Exception as e:
            metrics.sink_failures.labels(table=NOTIFICATIONS).inc()
            log.error(f"Notification write failed user_id:{draft.user_id} error:{e}")
            return False
        metrics.notifications_emitted.inc()
        return True
