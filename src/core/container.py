"""
Dependency Injection Container
"""
from typing import TypeVar, Dict, Any, Type, Union, get_type_hints, get_origin, get_args
import inspect
import logging

T = TypeVar('T')

logger = logging.getLogger(__name__)

class Container:
    """Dependency Injection Container"""

    def __init__(self):
        self._singletons: Dict[str, Any] = {}
        self._transients: Dict[str, Type] = {}

    def register_transient(self, interface: Type[T], implementation: Type[T]):
        """Register a service as transient (new instance on every resolution)"""
        key = self._get_key(interface)
        self._transients[key] = implementation

    def register_instance(self, interface: Type[T], instance: T):
        """Register a specific instance"""
        key = self._get_key(interface)
        self._singletons[key] = instance

    def is_registered(self, interface: Type[T]) -> bool:
        """Check whether an interface is registered"""
        key = self._get_key(interface)
        return key in self._transients or key in self._singletons

    def resolve_with_session(self, interface: Type[T], session) -> T:
        """Resolve a dependency, injecting the DB session wherever a 'session' parameter is declared"""
        key = self._get_key(interface)

        if key in self._singletons:
            return self._singletons[key]

        if key not in self._transients:
            raise ValueError(f"Cannot resolve {interface.__name__}: No registration found")

        implementation = self._transients[key]
        hints = get_type_hints(implementation.__init__)
        signature = inspect.signature(implementation.__init__)

        kwargs = {}
        for param_name, param in signature.parameters.items():
            if param_name == 'self':
                continue
            if param_name == 'session':
                kwargs[param_name] = session
                continue

            dependency = self._unwrap_optional(hints.get(param_name))
            if dependency is not None and self.is_registered(dependency):
                kwargs[param_name] = self.resolve_with_session(dependency, session)
            elif param.default is not inspect.Parameter.empty:
                kwargs[param_name] = param.default
            else:
                raise ValueError(f"Cannot resolve parameter {param_name} of {implementation.__name__}")

        return implementation(**kwargs)

    def clear(self):
        """Clear the container"""
        self._singletons.clear()
        self._transients.clear()
        logger.debug("Container cleared")

    def _get_key(self, interface: Type[T]) -> str:
        """Registration key for an interface"""
        return interface.__name__

    @staticmethod
    def _unwrap_optional(annotation):
        """Optional[X] -> X"""
        if get_origin(annotation) is Union:
            candidates = [arg for arg in get_args(annotation) if arg is not type(None)]
            return candidates[0] if candidates else None
        return annotation

# Global container instance
container = Container()
