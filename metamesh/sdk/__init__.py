from .run import ConfigRunResult, extract_from_config

__all__ = ["ConfigRunResult", "extract_from_config"]
