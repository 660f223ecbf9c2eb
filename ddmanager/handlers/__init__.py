from ddmanager.handlers import objects, probes

__all__ = [
    "objects",
    "probes",
]
