"""Elasticsearch tools for agent orchestrators."""

__version__ = "0.1.1"

from .config import ElasticsearchConfig, load_config

__all__ = ["ElasticsearchConfig", "__version__", "load_config"]
