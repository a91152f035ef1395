from .filesystem_config_provider import (
    ConnectivityResult,
    FileSystemConfigProvider,
    wizard_config_from_dict,
)

__all__ = ["FileSystemConfigProvider", "ConnectivityResult", "wizard_config_from_dict"]
