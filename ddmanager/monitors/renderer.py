"""Rendering of monitor templates against live objects.

Text fields of a template are Jinja2 templates evaluated against the object::

    name: "{{ namespace }}/{{ name }} is unavailable"
    query: "avg(last_5m):avg:kubernetes_state.deployment.replicas_available{deployment:{{ name }}} < {{ spec.replicas }}"

The context exposes ``name``, ``namespace``, ``kind``, ``labels``,
``annotations``, ``spec``, ``metadata``, the whole ``object`` and the ruleset's
``cluster_variables``. Undefined placeholders are errors.
"""
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Tuple

from jinja2 import StrictUndefined, Template, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from ddmanager.types.models import MonitorTemplate
from ddmanager.utils.errors import RenderError

#: Templated fields, as paths into the monitor definition
TEXT_FIELDS = ("name", "query", "message", "options.escalation_message")

_environment = SandboxedEnvironment(
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)


@lru_cache(maxsize=1024)
def _compile(source: str) -> Template:
    return _environment.from_string(source)


def render_text(source: str, context: Mapping[str, Any]) -> str:
    """Render a single text field.

    Raises:
        TemplateError: If the text is malformed or uses undefined values.
    """
    return _compile(source).render(context)


def build_context(
    obj: Mapping[str, Any],
    cluster_variables: Optional[Mapping[str, str]] = None,
    cluster_name: Optional[str] = None,
) -> Dict[str, Any]:
    metadata = obj.get("metadata") or {}
    return {
        "object": obj,
        "metadata": metadata,
        "name": metadata.get("name", ""),
        "namespace": metadata.get("namespace", ""),
        "kind": obj.get("kind", ""),
        "labels": metadata.get("labels") or {},
        "annotations": metadata.get("annotations") or {},
        "spec": obj.get("spec") or {},
        "cluster_name": cluster_name or "",
        "cluster_variables": dict(cluster_variables or {}),
    }


def _get_field(template: MonitorTemplate, path: str) -> Optional[str]:
    target = template
    for part in path.split("."):
        target = getattr(target, part, None)
        if target is None:
            return None
    return target


def _set_field(template: MonitorTemplate, path: str, value: str) -> None:
    *parents, leaf = path.split(".")
    target = template
    for part in parents:
        target = getattr(target, part)
    setattr(target, leaf, value)


def render(
    template: MonitorTemplate,
    obj: Mapping[str, Any],
    cluster_variables: Optional[Mapping[str, str]] = None,
    cluster_name: Optional[str] = None,
) -> Tuple[MonitorTemplate, List[RenderError]]:
    """Render the text fields of `template` against the live object `obj`.

    Every field is rendered on its own. A field that fails keeps its original
    text and the failure is returned alongside the rendered monitor.
    The input template is left untouched.
    """
    context = build_context(obj, cluster_variables, cluster_name)
    rendered = template.replace()
    errors: List[RenderError] = []
    for path in TEXT_FIELDS:
        source = _get_field(template, path)
        if not source:
            continue
        try:
            _set_field(rendered, path, render_text(source, context))
        except TemplateError as e:
            errors.append(RenderError(path, template.name, e))
    return rendered, errors
