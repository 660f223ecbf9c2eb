import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Set

from ddmanager.common.models.kinds import ObjectKey, ObjectKind
from ddmanager.common.models.tags import MonitorTags
from ddmanager.controllers.queue import QueueShutDown, WorkQueue
from ddmanager.monitors.reader import ProvisionedStateReader
from ddmanager.monitors.renderer import render
from ddmanager.monitors.sync import SyncEngine, SyncResult
from ddmanager.resources import BaseResource, Namespace, resource_for
from ddmanager.rulesets.matcher import matching_monitors
from ddmanager.rulesets.store import RulesetStore
from ddmanager.sensors import OperatorSensor
from ddmanager.types.models import MonitorTemplate
from ddmanager.types.settings import Settings
from ddmanager.utils.errors import ReconcileError
from ddmanager.utils.helpers import snapshot

logger = logging.getLogger(__name__)

CREATE = "create"
UPDATE = "update"
DELETE = "delete"
EVENT_TYPES = (CREATE, UPDATE, DELETE)


class ResourceController:
    """Reconciles the monitors of every object of one kind.

    Events only record the latest snapshot of an object and queue its key.
    Workers take keys from the queue and reconcile them: match the rules,
    render the templates and converge the monitoring backend. A key is
    reconciled by one worker at a time; events arriving meanwhile collapse
    into a single follow-up reconcile.
    """

    def __init__(
        self,
        kind: ObjectKind,
        store: RulesetStore,
        reader: ProvisionedStateReader,
        engine: SyncEngine,
        conf: Settings,
        resource: Optional[BaseResource] = None,
        namespaces: Optional[Namespace] = None,
        sensor: Optional[OperatorSensor] = None,
    ) -> None:
        self.kind = kind
        self.conf = conf
        self._store = store
        self._reader = reader
        self._engine = engine
        self._resource = resource or resource_for(kind)
        self._namespaces = namespaces or Namespace()
        self._sensor = sensor
        self._tags = MonitorTags(conf.owner_tag, conf.cluster_name)
        self.queue = WorkQueue(
            kind.value,
            base_delay=conf.reconcile_backoff_base_seconds,
            max_delay=conf.reconcile_backoff_max_seconds,
            sensor=sensor,
        )
        # Latest snapshot seen for each key
        self._last_known: Dict[ObjectKey, Mapping[str, Any]] = {}
        # Keys whose latest event was a deletion
        self._deleted: Set[ObjectKey] = set()

    @property
    def resource(self) -> BaseResource:
        return self._resource

    @property
    def tags(self) -> MonitorTags:
        return self._tags

    def last_known(self, key: ObjectKey) -> Optional[Mapping[str, Any]]:
        return self._last_known.get(key)

    def enqueue(self, event_type: str, body: Mapping[str, Any]) -> ObjectKey:
        """Record an orchestrator event and queue the object for reconcile."""
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type `{event_type}`")
        key = ObjectKey.from_body(self.kind, body)
        self._last_known[key] = snapshot(body)
        if event_type == DELETE:
            self._deleted.add(key)
        else:
            self._deleted.discard(key)
        if self.queue.add(key):
            logger.debug(f"Queued {key} after {event_type} event.")
        return key

    def enqueue_key(self, key: ObjectKey) -> None:
        """Queue an object for reconcile without a new snapshot."""
        self.queue.add(key)

    async def run(self) -> None:
        """Consume the work queue until it is shut down."""
        workers = max(1, self.conf.reconcile_workers)
        logger.info(f"Starting {workers} worker(s) for resource type {self.kind.value}")
        await asyncio.gather(*(self._work() for _ in range(workers)))

    async def _work(self) -> None:
        while True:
            try:
                key = await self.queue.get()
            except QueueShutDown:
                return
            try:
                await self.process(key)
            finally:
                self.queue.done(key)

    async def process(self, key: ObjectKey) -> bool:
        """Reconcile `key`, scheduling a retry on failure.

        Returns:
            Whether the reconcile succeeded.
        """
        state = self._sensor.on_reconcile_start(self.kind.value, str(key)) if self._sensor else None
        try:
            await asyncio.wait_for(self.reconcile(key), self.conf.reconcile_timeout_seconds)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if self._sensor:
                self._sensor.on_reconcile_complete(self.kind.value, str(key), state, False, e)
            self._handle_error(key, e)
            return False
        self.queue.forget(key)
        if self._sensor:
            self._sensor.on_reconcile_complete(self.kind.value, str(key), state, True)
        return True

    def _handle_error(self, key: ObjectKey, error: Exception) -> None:
        if isinstance(error, asyncio.TimeoutError):
            error = TimeoutError(
                f"reconcile exceeded {self.conf.reconcile_timeout_seconds}s"
            )
        attempt = self.queue.num_requeues(key) + 1
        if attempt <= self.conf.reconcile_max_retries:
            delay = self.queue.add_rate_limited(key)
            logger.warning(
                f"Reconcile of {key} failed (attempt {attempt}/"
                f"{self.conf.reconcile_max_retries}), retrying in {delay:.1f}s: {error}",
                extra={"object_key": str(key)},
            )
            if self._sensor:
                self._sensor.on_reconcile_retry(self.kind.value, str(key), attempt, delay)
            return
        logger.error(
            f"Dropping {key} after {attempt} failed reconcile attempts: {error}",
            extra={"object_key": str(key)},
        )
        self.queue.forget(key)
        if key in self._deleted:
            self._forget_object(key)
        if self._sensor:
            self._sensor.on_reconcile_dropped(self.kind.value, str(key), error)

    def _forget_object(self, key: ObjectKey) -> None:
        self._deleted.discard(key)
        self._last_known.pop(key, None)

    async def reconcile(self, key: ObjectKey) -> SyncResult:
        """Converge the monitors of one object.

        Raises:
            BackendReadError: When the provisioned monitors can't be listed.
            ReconcileError: When a backend write failed.
        """
        if key in self._deleted:
            return await self.remove(key)

        obj = await self._resource.fetch(key.name, key.namespace)
        if obj is None:
            logger.info(f"{key} no longer exists, removing its monitors.")
            self._deleted.add(key)
            return await self.remove(key)
        self._last_known[key] = obj

        namespace_annotations = None
        if self.kind.namespaced and key.namespace:
            namespace_annotations = await self._namespaces.annotations(key.namespace)

        desired = self.desired_monitors(key, obj, namespace_annotations)
        provisioned = await self._reader.list_owned(self._tags.owner)
        result = await self._engine.converge(
            str(key), desired, provisioned, self._tags.object(key)
        )
        self._check(key, result)
        return result

    def desired_monitors(
        self,
        key: ObjectKey,
        obj: Mapping[str, Any],
        namespace_annotations: Optional[Mapping[str, str]],
    ) -> List[MonitorTemplate]:
        """Match, render and claim the monitors of an object."""
        ruleset = self._store.current()
        metadata = obj.get("metadata") or {}
        templates = matching_monitors(
            ruleset,
            self.kind.value,
            metadata.get("annotations") or {},
            namespace_annotations,
            self._tags.bound_object,
        )
        logger.info(
            f"{len(templates)} monitor(s) apply to {key}.",
            extra={"object_key": str(key)},
        )
        desired = []
        for template in templates:
            monitor, errors = render(
                template, obj, ruleset.cluster_variables, self.conf.cluster_name
            )
            for error in errors:
                logger.error(
                    f"{error} (object {key})",
                    extra={"object_key": str(key), "monitor": template.name},
                )
                if self._sensor:
                    self._sensor.on_render_error(str(key), template.name, error.field)
            desired.append(self._tags.claim(monitor, key))
        return desired

    async def remove(self, key: ObjectKey) -> SyncResult:
        """Delete every monitor owned by an object that no longer exists."""
        provisioned = await self._reader.list_owned(self._tags.owner)
        result = await self._engine.remove_all(str(key), provisioned, self._tags.object(key))
        self._check(key, result)
        logger.info(
            f"Removed {len(result.deleted)} monitor(s) of deleted {key}.",
            extra={"object_key": str(key)},
        )
        self._forget_object(key)
        return result

    def _check(self, key: ObjectKey, result: SyncResult) -> None:
        if not result.ok:
            raise ReconcileError(str(key), result.errors)
        logger.debug(f"{result!r}")

    def shut_down(self) -> None:
        self.queue.shut_down()
