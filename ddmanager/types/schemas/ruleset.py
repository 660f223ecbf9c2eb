from typing import Any
from marshmallow import fields, post_load, validate
from ddmanager.types.base import BaseSchema, EXCLUDE, JSON
from ddmanager.types.models.ruleset import (
    Annotation,
    MatchRule,
    RulesetDocument,
)
from ddmanager.types.schemas.monitor import MonitorTemplateSchema


class AnnotationSchema(BaseSchema):
    __model__ = Annotation

    name = fields.Str(data_key="name", required=True, validate=validate.Length(min=1))
    value = fields.Str(data_key="value", required=True)


class MatchRuleSchema(BaseSchema):
    __model__ = MatchRule

    class Meta:
        unknown = EXCLUDE
        ordered = True

    object_type = fields.Str(data_key="type", required=True, validate=validate.Length(min=1))
    annotations = fields.List(
        fields.Nested(AnnotationSchema()),
        data_key="match_annotations",
        allow_none=True,
        load_default=list,
    )
    bound_objects = fields.List(
        fields.Str(), data_key="bound_objects", allow_none=True, load_default=list
    )
    monitors = fields.List(
        fields.Nested(MonitorTemplateSchema()),
        data_key="monitors",
        allow_none=True,
        load_default=list,
    )

    @post_load
    def make_object(self, data: JSON, **kwargs: Any) -> MatchRule:
        """Freeze collections, a loaded rule is never modified."""
        return self.__model__(
            object_type=data["object_type"],
            annotations=tuple(data.get("annotations") or ()),
            bound_objects=frozenset(data.get("bound_objects") or ()),
            monitors=tuple(data.get("monitors") or ()),
        )


class RulesetDocumentSchema(BaseSchema):
    __model__ = RulesetDocument

    class Meta:
        unknown = EXCLUDE
        ordered = True

    cluster_variables = fields.Dict(
        keys=fields.Str(),
        values=fields.Str(),
        data_key="cluster_variables",
        allow_none=True,
        load_default=dict,
    )
    rulesets = fields.List(
        fields.Nested(MatchRuleSchema()),
        data_key="rulesets",
        allow_none=True,
        load_default=list,
    )

    @post_load
    def make_object(self, data: JSON, **kwargs: Any) -> RulesetDocument:
        return self.__model__(
            cluster_variables=dict(data.get("cluster_variables") or {}),
            rulesets=tuple(data.get("rulesets") or ()),
        )
