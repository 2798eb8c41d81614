"""
Adapters layer - External data sources.
"""

from .yaml_repository import YamlScheduleRepository

__all__ = ["YamlScheduleRepository"]
