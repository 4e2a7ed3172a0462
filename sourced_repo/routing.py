import inspect
from collections.abc import Callable
from functools import singledispatch
from typing import Any, TypeVar, get_type_hints

from pydantic import BaseModel

T = TypeVar("T")


def _extract_payload_type(func: Callable[..., Any], param_index: int = 1) -> type:
    """Extract the payload type annotation from an applier method.

    Args:
        func: The applier method to inspect.
        param_index: Index of the parameter to extract
            (0=self, 1=first arg, etc.)

    Returns:
        The annotated payload type.

    Raises:
        ValueError: If the parameter is missing, lacks a type annotation, or
            is not annotated with a pydantic model.
    """
    func_name = getattr(func, "__name__", repr(func))
    params = list(inspect.signature(func).parameters.values())

    if len(params) <= param_index:
        raise ValueError(f"Applier {func_name} must have at least {param_index + 1} parameters")

    param = params[param_index]
    if param.annotation is inspect.Parameter.empty:
        raise ValueError(f"Applier {func_name} parameter '{param.name}' must have a type annotation")

    annotation = param.annotation
    if isinstance(annotation, str):
        # Postponed annotations
        annotation = get_type_hints(func).get(param.name, annotation)

    if not (isinstance(annotation, type) and issubclass(annotation, BaseModel)):
        raise ValueError(
            f"Applier {func_name} parameter '{param.name}' must be annotated "
            "with a pydantic model"
        )
    return annotation


class MessageRouter:
    """Dispatches event payloads to the applier registered for their type.

    Payload instances are routed with ``singledispatch``. The router also
    remembers every registered payload class by name so that stored events,
    which only carry the type name, can be turned back into payloads.
    """

    __slots__ = ("_dispatch", "_types")

    def __init__(self) -> None:
        # Payloads without an applier are ignored
        @singledispatch
        def dispatch(message: object, instance: object) -> object:
            return None

        self._dispatch = dispatch
        self._types: dict[str, type[BaseModel]] = {}

    def register(self, message_type: type[BaseModel], handler: Callable[[Any, Any], object]) -> None:
        """Register an applier for a payload type.

        Args:
            message_type: The payload class this applier handles.
            handler: The method to call, as ``handler(instance, payload)``.
        """

        def wrapper(msg: object, inst: object, h: Any = handler) -> object:
            return h(inst, msg)

        self._dispatch.register(message_type)(wrapper)
        self._types.setdefault(message_type.__name__, message_type)

    def route(self, instance: Any, message: Any) -> object:
        """Route a payload to its registered applier."""
        return self._dispatch(message, instance)

    def resolve(self, type_name: str) -> type[BaseModel] | None:
        """Look up a registered payload class by its stored type name."""
        return self._types.get(type_name)


class HandlerDecorator:
    """Marks methods as handlers for the payload type in their annotation."""

    def __init__(self, marker_attr: str, type_attr: str):
        self.marker_attr = marker_attr
        self.type_attr = type_attr

    def __call__(self, func: Callable[..., T]) -> Callable[..., T]:
        message_type = _extract_payload_type(func, param_index=1)
        setattr(func, self.type_attr, message_type)
        setattr(func, self.marker_attr, True)
        return func


applies_event = HandlerDecorator("_is_event_applier", "_applies_event_type")

applies_event.__doc__ = """Decorator marking a method as an event applier.

The payload type is automatically extracted from the method's type annotation.

Example:
    >>> class Account(Entity):
    ...     @applies_event
    ...     def apply_opened(self, evt: AccountOpened) -> None:
    ...         self.owner = evt.owner
"""


def setup_routing(cls: type, marker_attr: str, type_attr: str) -> MessageRouter:
    """Set up message routing for a class.

    Scans the class hierarchy for methods decorated with the specified marker
    and registers them with a MessageRouter. Subclass appliers take
    precedence over inherited ones for the same payload type.

    Args:
        cls: The class to set up routing for.
        marker_attr: Attribute name marking decorated methods.
        type_attr: Attribute name storing the payload type.

    Returns:
        A configured MessageRouter.
    """
    router = MessageRouter()

    for klass in reversed(cls.__mro__):
        for value in klass.__dict__.values():
            if getattr(value, marker_attr, None):
                router.register(getattr(value, type_attr), value)

    return router


def setup_event_applying(cls: type) -> MessageRouter:
    """Set up event applying for an entity class."""
    return setup_routing(
        cls,
        marker_attr="_is_event_applier",
        type_attr="_applies_event_type",
    )
