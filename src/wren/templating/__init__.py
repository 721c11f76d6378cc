"""Templating — kida environment setup and view-data serializers."""

from wren.templating.integration import ViewBuilder, create_environment
from wren.templating.serializers import to_json, to_xml

__all__ = ["ViewBuilder", "create_environment", "to_json", "to_xml"]
