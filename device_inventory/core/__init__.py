from .config_manager import DeviceInventoryConfig, get_config_manager, load_config, load_config_async
from .logging_config import configure_logging
from .logging_utils import get_module_logger
from .state_persistence import InMemoryStorage, JsonFileStorage, KeyValueStorage

__all__ = [
    'DeviceInventoryConfig',
    'InMemoryStorage',
    'JsonFileStorage',
    'KeyValueStorage',
    'configure_logging',
    'get_config_manager',
    'get_module_logger',
    'load_config',
    'load_config_async',
]
