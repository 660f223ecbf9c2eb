import asyncio
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Set

from ddmanager.common.models.kinds import ObjectKey, ObjectKind
from ddmanager.controllers.resource import DELETE, ResourceController
from ddmanager.monitors.reader import ProvisionedStateReader
from ddmanager.monitors.sync import SyncEngine
from ddmanager.resources import Namespace, resource_for
from ddmanager.rulesets.store import RulesetStore
from ddmanager.sensors import OperatorSensor
from ddmanager.types.settings import Settings

logger = logging.getLogger(__name__)

#: Seconds to wait before restarting a crashed controller
RESTART_DELAY = 5.0


class ControllerSupervisor:
    """Runs one isolated resource controller per watched kind.

    A controller that crashes is logged and restarted after a delay. The
    other controllers keep running meanwhile.
    """

    def __init__(
        self,
        kinds: Iterable[ObjectKind],
        store: RulesetStore,
        reader: ProvisionedStateReader,
        engine: SyncEngine,
        conf: Settings,
        sensor: Optional[OperatorSensor] = None,
        api_client=None,
        restart_delay: float = RESTART_DELAY,
    ) -> None:
        self.conf = conf
        self._store = store
        self._sensor = sensor
        self._restart_delay = restart_delay
        self._namespaces = Namespace(api_client)
        self.controllers: Dict[ObjectKind, ResourceController] = {}
        for kind in kinds:
            self.controllers[kind] = ResourceController(
                kind,
                store,
                reader,
                engine,
                conf,
                resource=resource_for(kind, api_client),
                namespaces=self._namespaces,
                sensor=sensor,
            )
        self._tasks: Dict[ObjectKind, asyncio.Task] = {}
        self._stopping = False

    @property
    def kinds(self) -> Set[ObjectKind]:
        return set(self.controllers)

    def controller(self, kind: ObjectKind) -> Optional[ResourceController]:
        return self.controllers.get(kind)

    def start(self) -> None:
        for kind, controller in self.controllers.items():
            if kind in self._tasks and not self._tasks[kind].done():
                continue
            self._tasks[kind] = asyncio.create_task(
                self._supervise(controller), name=f"controller-{kind.value}"
            )
        logger.info(
            f"Started controllers for {', '.join(k.value for k in self.controllers)}"
        )

    async def _supervise(self, controller: ResourceController) -> None:
        kind = controller.kind.value
        while not self._stopping:
            try:
                await controller.run()
                return
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Controller for {kind} crashed, restarting in {self._restart_delay}s: {e}")
                logger.exception(e)
                if self._sensor:
                    self._sensor.on_controller_restart(kind, e)
                await asyncio.sleep(self._restart_delay)

    def dispatch(
        self, kind: ObjectKind, event_type: str, body: Mapping[str, Any]
    ) -> Optional[ObjectKey]:
        """Hand an orchestrator event to the controller of its kind."""
        controller = self.controllers.get(kind)
        if controller is None:
            logger.debug(f"Ignoring {event_type} event of unwatched kind {kind.value}")
            return None
        key = controller.enqueue(event_type, body)
        if (
            kind is ObjectKind.NAMESPACE
            and event_type != DELETE
            and self.conf.reevaluate_bound_on_namespace_change
        ):
            self._spawn_reevaluation(key.name)
        return key

    def bound_kinds(self) -> Set[ObjectKind]:
        """Watched kinds that a binding rule can attach monitors to."""
        kinds = set()
        for rule in self._store.current().rules:
            if not rule.is_binding:
                continue
            for name in rule.bound_objects:
                try:
                    kind = ObjectKind.parse(name)
                except ValueError:
                    continue
                if kind.namespaced and kind in self.controllers:
                    kinds.add(kind)
        return kinds

    def _spawn_reevaluation(self, namespace: str) -> None:
        task = asyncio.create_task(
            self.reevaluate_namespace(namespace), name=f"reevaluate-{namespace}"
        )
        task.add_done_callback(_log_task_error)

    async def reevaluate_namespace(self, namespace: str) -> int:
        """Queue every object of a bound kind living in `namespace`.

        Returns:
            The number of objects queued.
        """
        queued = 0
        for kind in sorted(self.bound_kinds(), key=lambda k: k.value):
            controller = self.controllers[kind]
            for obj in await controller.resource.search(namespace):
                controller.enqueue_key(ObjectKey.from_body(kind, obj))
                queued += 1
        if queued:
            logger.info(f"Queued {queued} object(s) of namespace {namespace} for reconcile.")
        return queued

    async def stop(self, timeout: float = 10.0) -> None:
        """Shut down the queues and wait for the controllers to finish."""
        self._stopping = True
        for controller in self.controllers.values():
            controller.shut_down()
        tasks = [task for task in self._tasks.values() if not task.done()]
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=timeout)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()
        logger.info("Controllers stopped")


def _log_task_error(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"{task.get_name()} failed: {error}")
