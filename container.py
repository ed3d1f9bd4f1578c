"""
Service Container for Starship Saboteur.

Builds every engine service once, in dependency order, and hands the same
instances to the socket handlers and to app.py.
"""

import inspect
from typing import Any, Callable, Dict, List, Optional

from config_factory import ConfigError

DEFAULT_CONTENT_FILE = 'ship_content.yaml'


class CircularDependencyError(Exception):
    """Raised when services depend on each other in a loop"""
    pass


class ServiceNotFoundError(Exception):
    """Raised when requested service is not registered"""
    pass


class ServiceDefinition:
    """How a service is built: factory, the services it needs and extra keyword config"""

    def __init__(self, name: str, factory: Callable, dependencies: List[str] = None,
                 config: Dict[str, Any] = None):
        self.name = name
        self.factory = factory
        self.dependencies = dependencies or []
        self.config = config or {}


class ServiceContainer:
    """
    Dependency injection container holding one instance per service.

    Dependencies are listed explicitly at registration and passed positionally.
    External objects such as the SocketIO server are injected as ready instances.
    """

    def __init__(self):
        self._services: Dict[str, ServiceDefinition] = {}
        self._instances: Dict[str, Any] = {}
        self._creating: List[str] = []
        self._config: Dict[str, Any] = {}

    def register(self, name: str, factory: Callable, dependencies: List[str] = None,
                 config: Dict[str, Any] = None) -> 'ServiceContainer':
        """
        Register a service with the container.

        Args:
            name: Service name for retrieval
            factory: Class or function creating the service
            dependencies: Names of the services passed to the factory, in order
            config: Keyword arguments for function factories

        Returns:
            Self for method chaining
        """
        if name in self._services:
            raise ValueError(f"Service '{name}' is already registered")
        if not callable(factory):
            raise ValueError(f"Factory for '{name}' must be callable")

        self._services[name] = ServiceDefinition(name, factory, dependencies, config)
        return self

    def configure_services(self) -> 'ServiceContainer':
        """Register all Starship Saboteur services with their dependencies."""
        from config_factory import ConfigurationFactory
        from src.services.validation_service import ValidationService
        from src.services.error_response_factory import ErrorResponseFactory
        from src.services.concurrency_control_service import ConcurrencyControlService
        from src.services.player_registry import PlayerRegistry
        from src.services.room_registry import RoomRegistry
        from src.services.task_scheduler import TaskScheduler
        from src.services.vote_tally import VoteTally
        from src.services.tick_simulator import TickSimulator
        from src.services.broadcast_service import BroadcastService
        from src.services.room_lifecycle_controller import RoomLifecycleController

        self.register('ConfigurationFactory', ConfigurationFactory)
        self.register('ValidationService', ValidationService)
        self.register('ErrorResponseFactory', ErrorResponseFactory)

        content_config = {}
        if self._config.get('content_file'):
            content_config['content_file'] = self._config['content_file']
        self.register('ContentManager', _create_content_manager,
                      dependencies=['ConfigurationFactory'], config=content_config)

        # State owners
        self.register('ConcurrencyControlService', ConcurrencyControlService)
        self.register('PlayerRegistry', PlayerRegistry)
        self.register('RoomRegistry', RoomRegistry)
        self.register('TaskScheduler', TaskScheduler)

        # Game mechanics
        self.register('VoteTally', VoteTally, dependencies=['PlayerRegistry'])
        self.register('TickSimulator', TickSimulator, dependencies=['TaskScheduler', 'ContentManager'])

        # socketio is injected as an external dependency
        self.register('BroadcastService', BroadcastService, dependencies=['socketio', 'ErrorResponseFactory'])

        self.register('RoomLifecycleController', RoomLifecycleController, dependencies=[
            'RoomRegistry', 'PlayerRegistry', 'ConcurrencyControlService', 'VoteTally',
            'TickSimulator', 'BroadcastService', 'ContentManager', 'TaskScheduler'
        ])
        return self

    def set_external_dependency(self, name: str, instance: Any) -> 'ServiceContainer':
        """Provide an object created outside the container, such as the SocketIO server."""
        self._instances[name] = instance
        return self

    def set_config(self, config: Dict[str, Any]) -> 'ServiceContainer':
        self._config.update(config)
        return self

    def get(self, name: str) -> Any:
        """
        Get a service instance, creating it and its dependencies on first use.

        Raises:
            ServiceNotFoundError: If service is not registered
            CircularDependencyError: If the dependency chain loops
        """
        if name in self._instances:
            return self._instances[name]
        if name not in self._services:
            raise ServiceNotFoundError(f"Service '{name}' is not registered")
        return self._create_service(name)

    def _create_service(self, name: str) -> Any:
        if name in self._creating:
            cycle = ' -> '.join(self._creating + [name])
            raise CircularDependencyError(f"Circular dependency detected: {cycle}")

        self._creating.append(name)
        try:
            service_def = self._services[name]
            dependencies = [self.get(dep_name) for dep_name in service_def.dependencies]

            if inspect.isclass(service_def.factory):
                instance = service_def.factory(*dependencies)
            else:
                instance = service_def.factory(*dependencies, **service_def.config)

            self._instances[name] = instance
            return instance
        finally:
            self._creating.remove(name)

    def has_service(self, name: str) -> bool:
        return name in self._services

    def get_service_names(self) -> List[str]:
        return list(self._services.keys())

    def validate_dependencies(self) -> Dict[str, List[str]]:
        """
        Check that every declared dependency can be resolved.

        Returns:
            Mapping of service name to its missing dependencies (empty when valid)
        """
        issues = {}
        for name, service_def in self._services.items():
            missing = [dep for dep in service_def.dependencies
                       if not self.has_service(dep) and dep not in self._instances]
            if missing:
                issues[name] = missing
        return issues

    def clear(self) -> 'ServiceContainer':
        """Drop all services, instances and configuration"""
        self._services.clear()
        self._instances.clear()
        self._creating.clear()
        self._config.clear()
        return self

    def __repr__(self) -> str:
        return f"ServiceContainer(services={len(self._services)}, instances={len(self._instances)})"


_app_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the global application service container"""
    global _app_container
    if _app_container is None:
        _app_container = ServiceContainer()
    return _app_container


def configure_container(socketio=None, config=None) -> ServiceContainer:
    """
    Configure the global service container with Starship Saboteur services.

    Args:
        socketio: Flask-SocketIO instance used for broadcasts
        config: Application configuration dictionary

    Returns:
        Configured service container
    """
    container = get_container()
    container.clear()

    if socketio is not None:
        container.set_external_dependency('socketio', socketio)
    if config is not None:
        container.set_config(config)

    container.configure_services()
    return container


def reset_container() -> None:
    """Drop the global container (useful for testing)"""
    global _app_container
    _app_container = None


def _create_content_manager(config_factory, content_file: Optional[str] = None):
    """Build and load the ContentManager for the configured content file"""
    from src.content_manager import ContentManager
    if content_file is None:
        try:
            content_file = config_factory.get_config().content_file
        except ConfigError:
            content_file = DEFAULT_CONTENT_FILE
    content_manager = ContentManager(content_file)
    content_manager.load_content_from_yaml()
    return content_manager
