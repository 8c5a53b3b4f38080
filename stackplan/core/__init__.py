from ._async_helper import run_async
from ._log_helper import debug, warn
from ._yaml_loader import YamlLoader
from .data_model import DataModel, FrozenDataModel

__all__ = [
    "DataModel",
    "FrozenDataModel",
    "YamlLoader",
    "debug",
    "run_async",
    "warn",
]
