"""
Strategy Composition - The decoration chain behind every site plugin.

A site plugin is declared as a base class plus a stack of strategies applied as
class decorators::

    @madara.MangaCSS(r'^{origin}/manga/[^/]+/$')
    @madara.MangasMultiPageAJAX()
    @common.ImageAjax()
    class Example(SitePlugin):
        ...

Each strategy overrides one or more capabilities. Python applies class
decorators bottom-up, so the decorator closest to the class is the innermost
layer and the topmost decorator is the outermost one. ``compose`` binds the
layers once, when the plugin is constructed: every override receives a
``proceed`` callable pointing at the layer below it and decides itself whether
to call it. For the same capability the last applied layer wins; distinct
capabilities are independent of each other.
"""

import functools
import logging
from types import MappingProxyType
from typing import Any, Awaitable, Callable, ClassVar, Dict, Iterable, Mapping, NamedTuple, Tuple, TypeVar

from mangaweave.core.exceptions import PluginError
from mangaweave.core.models import REQUIRED_CAPABILITIES, Capability


logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[Any]]
PluginClass = TypeVar("PluginClass", bound=type)

BASE_LAYER = "base"


def provides(capability: Capability) -> Callable[[Handler], Handler]:
    """
    Mark a plugin method as the base-layer implementation of a capability.

    Example::

        class Example(SitePlugin):
            @provides(Capability.CHAPTERS)
            async def _chapters(self, container):
                ...
    """
    def decorator(function: Handler) -> Handler:
        function.__capability__ = capability  # type: ignore[attr-defined]
        return function
    return decorator


class Strategy:
    """
    A reusable override of one or more capabilities.

    Concrete strategies are frozen dataclasses: they carry configuration only
    and never share mutable state with other layers. For each capability in
    ``capabilities`` the strategy defines an async method named after the
    capability value, with the signature ``(self, plugin, proceed, *args)``.
    """

    capabilities: ClassVar[Tuple[Capability, ...]] = ()

    def __call__(self, cls: PluginClass) -> PluginClass:
        """Apply the strategy to a plugin class as a decorator."""
        if not hasattr(cls, "strategies"):
            raise TypeError(f"{self.name} can only decorate site plugin classes, got {cls!r}")
        # A new tuple on the decorated class, the parent's layers stay untouched
        cls.strategies = tuple(cls.strategies) + (self,)
        return cls

    @property
    def name(self) -> str:
        return type(self).__name__

    def bind(self, capability: Capability, plugin: Any, proceed: Handler) -> Handler:
        """Bind this layer's override of ``capability`` on top of ``proceed``."""
        method = getattr(self, capability.value, None)
        if method is None:
            raise PluginError(
                f"{self.name} declares {capability} but does not implement it",
                plugin_name=getattr(plugin, "identifier", None),
            )
        return functools.partial(method, plugin, proceed)


class Binding(NamedTuple):
    """The layer currently answering one capability."""

    capability: Capability
    layer: str
    handler: Handler


def _unbound(capability: Capability, plugin: Any) -> Handler:
    async def handler(*args: Any, **kwargs: Any) -> Any:
        # Optional capabilities answer "not recognised"
        if capability not in REQUIRED_CAPABILITIES:
            return None
        raise PluginError(
            f"No layer below provides {capability} for plugin '{getattr(plugin, 'identifier', plugin)}'",
            plugin_name=getattr(plugin, "identifier", None),
        )
    return handler


class DecorationChain:
    """Immutable mapping of capabilities onto their bound layers."""

    def __init__(self, bindings: Mapping[Capability, Binding], layers: Tuple[str, ...]):
        self._bindings = MappingProxyType(dict(bindings))
        self.layers = layers

    def __contains__(self, capability: object) -> bool:
        return capability in self._bindings

    def handler(self, capability: Capability) -> Handler:
        """Get the outermost handler of a capability."""
        binding = self._bindings.get(capability)
        if binding is None:
            raise PluginError(f"Capability {capability} is not supported")
        return binding.handler

    def layer(self, capability: Capability) -> str:
        """Get the name of the layer answering a capability."""
        binding = self._bindings.get(capability)
        return binding.layer if binding else ""

    def missing(self, required: Iterable[Capability]) -> Tuple[Capability, ...]:
        """Get the required capabilities that no layer binds."""
        return tuple(capability for capability in required if capability not in self._bindings)

    def describe(self) -> Dict[str, str]:
        """Get a capability → layer overview, in contract order."""
        return {
            capability.value: self._bindings[capability].layer
            for capability in Capability
            if capability in self._bindings
        }


def base_layer(plugin: Any) -> Dict[Capability, Handler]:
    """
    Collect the ``@provides`` methods of a plugin's class hierarchy.

    Subclasses override the implementations inherited from their parents.
    """
    handlers: Dict[Capability, Handler] = {}
    for klass in reversed(type(plugin).__mro__):
        for name, member in vars(klass).items():
            capability = getattr(member, "__capability__", None)
            if isinstance(capability, Capability):
                handlers[capability] = getattr(plugin, name)
    return handlers


def compose(plugin: Any, strategies: Iterable[Strategy]) -> DecorationChain:
    """
    Build the decoration chain of a plugin.

    Args:
        plugin: The plugin instance every layer is bound to
        strategies: Layers in application order (innermost first)

    Returns:
        The composed chain
    """
    bindings: Dict[Capability, Binding] = {
        capability: Binding(capability, BASE_LAYER, handler)
        for capability, handler in base_layer(plugin).items()
    }
    layers = [BASE_LAYER]

    for strategy in strategies:
        if not isinstance(strategy, Strategy):
            raise PluginError(f"Invalid layer {strategy!r}", plugin_name=getattr(plugin, "identifier", None))
        for capability in strategy.capabilities:
            previous = bindings.get(capability)
            proceed = previous.handler if previous else _unbound(capability, plugin)
            bindings[capability] = Binding(capability, strategy.name, strategy.bind(capability, plugin, proceed))
        layers.append(strategy.name)

    logger.debug(f"Composed {type(plugin).__name__}: {' → '.join(layers)}")
    return DecorationChain(bindings, tuple(layers))


__all__ = [
    "Handler",
    "Strategy",
    "Binding",
    "DecorationChain",
    "BASE_LAYER",
    "provides",
    "base_layer",
    "compose",
]
