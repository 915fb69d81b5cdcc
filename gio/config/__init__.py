from .main import ApiEndpoint, ClientConfig, EventOptions, load_client_config

__all__ = [
    "ApiEndpoint",
    "ClientConfig",
    "EventOptions",
    "load_client_config",
]
