"""
Recursive construction of object graphs from configuration trees.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from ..domain.interfaces import ConfigurationNode, DependencyResolver
from ..domain.models import RELOAD_ON_CHANGE_KEY, TYPE_KEY, VALUE_KEY, MemberKind
from ..infrastructure.exceptions import (
    ConstructionFailureError, ConversionFailureError, InvalidConfigurationError, ObjectFactoryException
)
from ..infrastructure.observability import get_logger
from .conversion import DefaultTypes, ValueConverters, convert_scalar, is_assignable, locate_type
from .members import find_members, get_constructors, normalize_name
from .ranking import ConstructorRanker
from .resolution import Resolver
from .type_utils import (
    element_type, is_abstract_type, is_any, is_constructible, is_dict_type, is_insertable_mapping,
    is_list_type, is_scalar_type, is_set_type, is_tuple_type, mapping_types, optional_default,
    origin_of, type_name, unwrap_optional
)

logger = get_logger("objectfactory.builder")

# (node, interface_type, declaring_type, member_name) -> proxy
ProxyFactory = Callable[[ConfigurationNode, type, Optional[type], Optional[str]], Any]

# Nested proxies created by the build running in the current context
_created_proxies: ContextVar[Optional[List[Any]]] = ContextVar("objectfactory_created_proxies", default=None)


def well_known_value(node: Optional[ConfigurationNode], key: str) -> Optional[str]:
    if node is None:
        return None
    return node[key]


def is_flag_set(node: Optional[ConfigurationNode], key: str, flag: str) -> bool:
    value = well_known_value(node, key)
    return value is not None and value.strip().lower() == flag


class ObjectBuilder:
    """
    Builds instances of arbitrary types from configuration nodes.

    Holds no mutable state after construction, so one builder can be shared
    across threads.

    Args:
        default_types: Concrete types to use when a node has no ``type`` key
        value_converters: Custom scalar converters
        resolver: Supplies constructor arguments that the configuration lacks
        proxy_factory: Creates reloading proxies for nested interface-typed
            members whose node sets ``reloadOnChange: true``
    """

    def __init__(
        self,
        default_types: Optional[DefaultTypes] = None,
        value_converters: Optional[ValueConverters] = None,
        resolver: Optional[DependencyResolver] = None,
        proxy_factory: Optional[ProxyFactory] = None
    ):
        self.default_types = default_types if default_types is not None else DefaultTypes()
        self.value_converters = value_converters if value_converters is not None else ValueConverters()
        self.resolver = resolver if resolver is not None else Resolver.empty()
        self.proxy_factory = proxy_factory
        self._ranker = ConstructorRanker(self.resolver)

    @contextmanager
    def collect_proxies(self) -> Iterator[List[Any]]:
        """
        Collect the nested reloading proxies created by builds inside the block.

        Blocks nest; each collects only the proxies its own build creates
        directly, not the ones created inside those proxies.
        """
        proxies: List[Any] = []
        token = _created_proxies.set(proxies)
        try:
            yield proxies
        finally:
            _created_proxies.reset(token)

    def build(self, node: ConfigurationNode, target_type: type,
              declaring_type: Optional[type] = None, member_name: Optional[str] = None) -> Any:
        """
        Build an instance of ``target_type`` (or of the type the node names) from ``node``.

        Raises:
            InvalidConfigurationError: no usable concrete type
            ConstructionFailureError: no invokable constructor
            ConversionFailureError: a value could not be converted
        """
        concrete_type, binding_node = self.resolve_concrete_type(node, target_type, declaring_type, member_name)
        return self.build_instance(binding_node, concrete_type)

    def resolve_concrete_type(self, node: ConfigurationNode, target_type: Any,
                              declaring_type: Optional[type] = None,
                              member_name: Optional[str] = None) -> Tuple[type, Optional[ConfigurationNode]]:
        """Return the type to construct and the node its members bind against."""
        type_value = well_known_value(node, TYPE_KEY)
        if type_value:
            concrete_type = locate_type(type_value)
            if not is_assignable(concrete_type, target_type):
                raise InvalidConfigurationError(
                    f"The configured type '{type_name(concrete_type)}' is not assignable "
                    f"to the target type '{type_name(target_type)}'",
                    target_type=target_type,
                    declared_type=concrete_type,
                    config_path=node.path
                )
            return concrete_type, node.get_child(VALUE_KEY)

        target, _ = unwrap_optional(target_type)
        default_type = self.default_types.try_get(target, declaring_type, member_name)
        if default_type is not None:
            return default_type, node

        if is_constructible(target):
            return target, node

        raise InvalidConfigurationError(
            f"No concrete type is specified for '{type_name(target_type)}': "
            f"set a '{TYPE_KEY}' key or register a default type",
            target_type=target_type,
            config_path=node.path
        )

    def build_instance(self, node: Optional[ConfigurationNode], concrete_type: type) -> Any:
        """Construct ``concrete_type`` and bind its members from the children of ``node``."""
        children: Dict[str, ConfigurationNode] = {}
        if node is not None:
            for child in node.get_children():
                children.setdefault(normalize_name(child.key), child)

        candidate = self._ranker.select(concrete_type, get_constructors(concrete_type), children.keys())
        constructor = candidate.constructor

        arguments: Dict[str, Any] = {}
        consumed = set()
        missing: List[str] = []
        for parameter in constructor.parameters:
            key = normalize_name(parameter.name)
            child = children.get(key)
            if child is not None:
                arguments[parameter.name] = self.convert(child, parameter.annotation, concrete_type, parameter.name)
                consumed.add(key)
                continue
            value, found = self.resolver.try_resolve(parameter)
            if found:
                arguments[parameter.name] = value
            elif not parameter.has_default:
                missing.append(parameter.name)

        if missing:
            raise ConstructionFailureError(
                f"No value for required parameters of {constructor}: {', '.join(missing)}",
                target_type=concrete_type,
                missing_parameter_names=missing
            )

        try:
            instance = constructor.invoke(arguments)
        except ObjectFactoryException:
            raise
        except Exception as e:
            raise ConstructionFailureError(
                f"Constructor {constructor} raised: {e}",
                target_type=concrete_type,
                cause=e
            ) from e

        for key, child in children.items():
            if key not in consumed:
                self._bind_property(instance, concrete_type, child)

        return instance

    def _bind_property(self, instance: Any, concrete_type: type, node: ConfigurationNode) -> None:
        members = [m for m in find_members(concrete_type, node.key) if m.kind is MemberKind.PROPERTY]
        if not members:
            logger.debug(
                "Configuration key has no matching member",
                extra={"type": type_name(concrete_type), "path": node.path}
            )
            return

        member = members[0]
        if member.writable:
            value = self.convert(node, member.declared_type, concrete_type, member.name)
            try:
                setattr(instance, member.name, value)
            except (AttributeError, TypeError, ValueError) as e:
                raise ConversionFailureError(
                    f"Cannot assign '{member.name}' on '{type_name(concrete_type)}': {e}",
                    target_type=member.declared_type, config_path=node.path, cause=e
                ) from e
            return

        collection = getattr(instance, member.name, None)
        if collection is None:
            raise InvalidConfigurationError(
                f"Read-only member '{member.name}' of '{type_name(concrete_type)}' is None and cannot be populated",
                target_type=member.declared_type,
                config_path=node.path
            )
        self._populate(collection, node, member.declared_type)

    def _populate(self, collection: Any, node: ConfigurationNode, declared_type: Any) -> None:
        shape, _ = unwrap_optional(declared_type)
        if is_insertable_mapping(shape):
            _, value_type = mapping_types(shape)
            for child in node.get_children():
                collection[child.key] = self.convert(child, value_type)
            return

        item_type = element_type(shape)
        items = node.get_children()
        if not items and node.value is not None:
            items = [node]
        add = collection.add if is_set_type(shape) else collection.append
        for child in items:
            add(self.convert(child, item_type))

    def convert(self, node: ConfigurationNode, target_type: Any,
                declaring_type: Optional[type] = None, member_name: Optional[str] = None) -> Any:
        """Convert the value or subtree at ``node`` to ``target_type``."""
        target, optional = unwrap_optional(target_type)
        children = node.get_children()

        if is_any(target):
            if well_known_value(node, TYPE_KEY):
                return self.build(node, object, declaring_type, member_name)
            return self._convert_untyped(node)

        if (self.proxy_factory is not None and is_abstract_type(target)
                and is_flag_set(node, RELOAD_ON_CHANGE_KEY, "true")):
            proxy = self.proxy_factory(node, target, declaring_type, member_name)
            created = _created_proxies.get()
            if created is not None:
                created.append(proxy)
            return proxy

        if not children:
            if node.value is None:
                if optional:
                    return None
                empty = optional_default(target)
                if empty is not None:
                    return empty
                if is_scalar_type(target):
                    raise ConversionFailureError(
                        f"No value configured for '{type_name(target_type)}'",
                        target_type=target_type, config_path=node.path
                    )
                return self.build(node, target, declaring_type, member_name)
            if is_list_type(target) or is_set_type(target) or is_tuple_type(target):
                return self._convert_sequence([node], target)
            return convert_scalar(node.value, target_type, self.value_converters,
                                  declaring_type, member_name, node.path)

        if is_dict_type(target):
            key_type, value_type = mapping_types(target)
            return {
                self._convert_key(child, key_type): self.convert(child, value_type)
                for child in children
            }

        if is_list_type(target) or is_set_type(target) or is_tuple_type(target):
            return self._convert_sequence(children, target)

        if is_scalar_type(target):
            raise ConversionFailureError(
                f"Cannot convert a configuration section to '{type_name(target_type)}'",
                target_type=target_type, config_path=node.path
            )

        return self.build(node, target, declaring_type, member_name)

    def _convert_key(self, node: ConfigurationNode, key_type: Any) -> Any:
        if is_any(key_type) or key_type is str:
            return node.key
        return convert_scalar(node.key, key_type, self.value_converters, path=node.path)

    def _convert_sequence(self, items: List[ConfigurationNode], target: Any) -> Any:
        if is_tuple_type(target):
            args = getattr(target, "__args__", ())
            if args and args[-1] is not Ellipsis:
                if len(args) != len(items):
                    raise ConversionFailureError(
                        f"Expected {len(args)} items for '{type_name(target)}', got {len(items)}",
                        target_type=target, config_path=items[0].path if items else None
                    )
                return tuple(self.convert(item, t) for item, t in zip(items, args))
            return tuple(self.convert(item, element_type(target)) for item in items)

        values = [self.convert(item, element_type(target)) for item in items]
        if is_set_type(target):
            return frozenset(values) if origin_of(target) is frozenset else set(values)
        return values

    def _convert_untyped(self, node: ConfigurationNode) -> Any:
        children = node.get_children()
        if not children:
            return node.value
        if all(child.key.isdigit() for child in children):
            return [self._convert_untyped(child) for child in children]
        return {child.key: self._convert_untyped(child) for child in children}
