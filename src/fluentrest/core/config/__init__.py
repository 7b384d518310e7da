from .loader import RestClientConfig, config_from_env, load_config

__all__ = ["RestClientConfig", "config_from_env", "load_config"]
