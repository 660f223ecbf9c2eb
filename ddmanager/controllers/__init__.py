from ddmanager.controllers.queue import WorkQueue, QueueShutDown
from ddmanager.controllers.resource import ResourceController, CREATE, UPDATE, DELETE
from ddmanager.controllers.supervisor import ControllerSupervisor

__all__ = [
    "WorkQueue",
    "QueueShutDown",
    "ResourceController",
    "ControllerSupervisor",
    "CREATE",
    "UPDATE",
    "DELETE",
]
