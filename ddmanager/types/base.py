import copy
from types import SimpleNamespace
from typing import Any, Dict, Mapping
from marshmallow import INCLUDE, EXCLUDE, Schema, post_load

EXCLUDE = EXCLUDE
JSON = Dict[str, Any]
MAX_REPR_LEN = 80


def _dump_value(value: Any, drop_none: bool) -> Any:
    if isinstance(value, BaseModel):
        return value.as_dict(drop_none=drop_none)
    elif isinstance(value, (list, tuple)):
        return [_dump_value(item, drop_none) for item in value]
    elif isinstance(value, (set, frozenset)):
        return sorted(_dump_value(item, drop_none) for item in value)
    elif isinstance(value, Mapping):
        return {
            k: _dump_value(v, drop_none)
            for k, v in value.items()
            if not (drop_none and v is None)
        }
    return value


class BaseModel(SimpleNamespace):
    """BaseModel that all models should inherit from.
    Note:
        Models are plain attribute bags built by their schema. Fields that are
        not present in the source document are simply absent, use `getattr`
        with a default when reading optional fields.
    Args:
        **kwargs: All passed parameters as converted to instance attributes.
    """

    def __init__(self, **kwargs: Any) -> None:
        self.__dict__.update(kwargs)

    def __repr__(self) -> str:
        """Return a default repr of any Model.
        Returns:
            The string model parameters up to a `MAX_REPR_LEN`.
        """
        repr_ = super().__repr__()
        if len(repr_) > MAX_REPR_LEN:
            return repr_[:MAX_REPR_LEN] + " ...)"
        else:
            return repr_

    def replace(self, **changes: Any) -> "BaseModel":
        """Return a deep copy of the model with `changes` applied."""
        clone = copy.deepcopy(self)
        clone.__dict__.update(changes)
        return clone

    def as_dict(self, drop_none: bool = False) -> Dict[str, Any]:
        """Dump the model (and nested models) to plain python structures."""
        return {
            key: _dump_value(value, drop_none)
            for key, value in self.__dict__.items()
            if not (drop_none and value is None)
        }


class UnknownModel(BaseModel):
    """A convenience class that inherits from `BaseModel`."""

    def keys(self):
        return self.__dict__.keys()

    def values(self):
        return self.__dict__.values()

    def items(self):
        return self.__dict__.items()


class BaseSchema(Schema):
    """The default schema for all models."""

    __model__: Any = UnknownModel
    """Determine the object that is created when the load method is called."""

    class Meta:
        unknown = INCLUDE
        ordered = True

    @post_load
    def make_object(self, data: JSON, **kwargs: Any) -> "__model__":
        """Build model for the given `__model__` class attribute.
        Args:
            data: The JSON diction to use to build the model.
            **kwargs: Unused but required to match signature of `Schema.make_object`
        Returns:
            An instance of the `__model__` class.
        """
        return self.__model__(**data)
