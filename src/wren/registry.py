"""Controller registry — naming conventions and precomputed action binding.

Controllers are registered once at startup. Registration inspects each
``*_action`` method a single time and records an ``ActionSpec`` describing
its parameters, so dispatching a request is a dictionary lookup followed
by a call.

Naming::

    controller "dns-record"            -> DnsRecordController
    prefix "admin", action "edit-user" -> admin_edit_user_action
"""

import inspect
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from wren.errors import ConfigurationError, NotFound

if TYPE_CHECKING:
    from wren.controller import Controller

ACTION_SUFFIX = "action"
CONTROLLER_SUFFIX = "Controller"

_WORD_BREAK = re.compile(r"[-_\s.]+")
_CAMEL_HUMP = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _words(value: str) -> list[str]:
    return [word for word in _WORD_BREAK.split(_CAMEL_HUMP.sub("_", value)) if word]


def studly_case(value: str) -> str:
    """``"dns-record"`` -> ``"DnsRecord"``."""
    return "".join(word[:1].upper() + word[1:].lower() for word in _words(value))


def snake_case(value: str) -> str:
    """``"editUser"`` / ``"edit-user"`` -> ``"edit_user"``."""
    return "_".join(word.lower() for word in _words(value))


def controller_class_name(controller: str) -> str:
    return studly_case(controller) + CONTROLLER_SUFFIX


def action_stem(prefix: str | None, action: str | None) -> str:
    """The action part of a method or template name: ``admin_edit_user``."""
    return snake_case("-".join(part for part in (prefix, action) if part))


def action_method_name(prefix: str | None, action: str | None) -> str:
    stem = action_stem(prefix, action)
    return f"{stem}_{ACTION_SUFFIX}" if stem else ACTION_SUFFIX


@dataclass(frozen=True, slots=True)
class ActionParam:
    """One bindable parameter of an action method."""

    name: str
    default: Any = None

    @property
    def key(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class ActionSpec:
    """An action method and the parameters it accepts by name."""

    name: str
    function: Callable[..., Any]
    params: tuple[ActionParam, ...] = ()

    def bind(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Keyword arguments for a call: each parameter's default, overlaid
        by the value in ``values`` whose key matches ignoring case.
        """
        folded = {str(key).lower(): value for key, value in values.items()}
        return {param.name: folded.get(param.key, param.default) for param in self.params}

    @classmethod
    def from_function(cls, name: str, function: Callable[..., Any]) -> "ActionSpec":
        params: list[ActionParam] = []
        for index, parameter in enumerate(inspect.signature(function).parameters.values()):
            if index == 0 or parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
                continue
            if parameter.kind is parameter.POSITIONAL_ONLY:
                msg = f"Action {function.__qualname__} cannot bind positional-only parameter {parameter.name!r}"
                raise ConfigurationError(msg)
            default = None if parameter.default is parameter.empty else parameter.default
            params.append(ActionParam(parameter.name, default))
        return cls(name=name, function=function, params=tuple(params))


@dataclass(frozen=True, slots=True)
class ControllerSpec:
    """A registered controller class and its actions keyed by method name."""

    cls: type["Controller"]
    plugin: str | None
    actions: Mapping[str, ActionSpec]

    @property
    def name(self) -> str:
        return self.cls.__name__


def _registry_key(plugin: str | None, class_name: str) -> tuple[str, str]:
    return ((plugin or "").lower(), class_name.lower())


class ControllerRegistry:
    """Controllers by ``(plugin, class name)``.

    Usage::

        registry = ControllerRegistry()
        registry.register(BlogController)
        spec = registry.resolve(None, "blog")
        spec.actions["show_action"].bind({"id": "3"})
    """

    __slots__ = ("_specs",)

    def __init__(self) -> None:
        self._specs: dict[tuple[str, str], ControllerSpec] = {}

    def register(self, cls: type["Controller"], *, plugin: str | None = None) -> ControllerSpec:
        if not cls.__name__.endswith(CONTROLLER_SUFFIX):
            msg = f"Controller class names must end with {CONTROLLER_SUFFIX!r}; got {cls.__name__!r}"
            raise ConfigurationError(msg)
        key = _registry_key(plugin, cls.__name__)
        if key in self._specs:
            msg = f"Controller {cls.__name__!r} is already registered" + (f" in plugin {plugin!r}" if plugin else "")
            raise ConfigurationError(msg)
        actions = {
            name: ActionSpec.from_function(name, member)
            for name, member in inspect.getmembers(cls, inspect.isfunction)
            if name.endswith(f"_{ACTION_SUFFIX}") and not name.startswith("_")
        }
        spec = ControllerSpec(cls=cls, plugin=plugin, actions=actions)
        self._specs[key] = spec
        return spec

    def resolve(self, plugin: str | None, controller: str | None) -> ControllerSpec:
        """Find the controller for the routed ``plugin`` / ``controller`` params."""
        if not controller:
            raise NotFound("No controller in the matched route")
        class_name = controller_class_name(controller)
        spec = self._specs.get(_registry_key(plugin, class_name))
        if spec is None:
            where = f"{plugin}.{class_name}" if plugin else class_name
            raise NotFound(f"Controller class {where!r} not found")
        return spec

    def spec_for(self, cls: type["Controller"]) -> ControllerSpec | None:
        for spec in self._specs.values():
            if spec.cls is cls:
                return spec
        return None

    def __iter__(self):
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)
