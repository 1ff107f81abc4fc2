"""
Bank template loading.

Each bank profile is described by a YAML file in the templates directory:
identity patterns for detection, label tables, owner-name rules and the
tunable constants its extractors use. Templates may extend another
template (usually ``generic``) and only spell out what differs.
"""
import re
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Pattern
import logging

import yaml

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


@lru_cache(maxsize=None)
def compile_pattern(source: str) -> Pattern:
    """Compile a template regex (case-insensitive, shared across calls)."""
    return re.compile(source, re.IGNORECASE)


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class BankTemplate:
    """Read-only view over one bank's template data."""

    def __init__(self, data: Dict[str, Any]):
        self.template_id = data["template_id"]
        self.bank = data.get("bank", self.template_id)
        self._data = _freeze(data)
        self.identity_patterns = [compile_pattern(p) for p in data.get("identity_patterns", [])]

    def section(self, name: str) -> Mapping[str, Any]:
        """Get a configuration section, empty if the template has none."""
        return self._data.get(name, MappingProxyType({}))

    def pattern(self, section: str, key: str) -> Optional[Pattern]:
        """Compiled regex stored at ``section.key``."""
        source = self.section(section).get(key)
        return compile_pattern(source) if source else None

    def patterns(self, section: str, key: str) -> List[Pattern]:
        """Compiled regex list stored at ``section.key``."""
        return [compile_pattern(p) for p in self.section(section).get(key, ())]

    def limit(self, key: str, default: int) -> int:
        """Character limit for a header scan."""
        return int(self.section("limits").get(key, default))

    def __repr__(self):
        return f"BankTemplate('{self.template_id}')"


def _read_yaml(path: Path) -> Optional[Dict[str, Any]]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading template {path}: {e}")
        return None


@lru_cache(maxsize=None)
def load_templates(templates_dir: Path = TEMPLATES_DIR) -> Mapping[str, BankTemplate]:
    """
    Load every template in a directory, resolving ``extends``.

    Args:
        templates_dir: Directory holding ``*.yaml`` templates

    Returns:
        Mapping of template ID to BankTemplate
    """
    raw = {}
    if not templates_dir.exists():
        logger.warning(f"Templates directory not found: {templates_dir}")
        return MappingProxyType({})

    for yaml_file in sorted(templates_dir.glob("*.yaml")):
        data = _read_yaml(yaml_file)
        if data and data.get("template_id"):
            raw[data["template_id"]] = data
            logger.debug(f"Loaded template: {data['template_id']}")

    def resolve(template_id: str, seen: tuple = ()) -> Dict[str, Any]:
        data = raw[template_id]
        parent = data.get("extends")
        if not parent:
            return data
        if parent in seen or parent not in raw:
            raise ValueError(f"Template {template_id} extends unknown template: {parent}")
        return _merge(resolve(parent, seen + (template_id,)), data)

    return MappingProxyType({tid: BankTemplate(resolve(tid)) for tid in raw})


def get_template(template_id: str) -> BankTemplate:
    """Get a bank template by ID."""
    template = load_templates().get(template_id)
    if template is None:
        raise ValueError(f"Template not found: {template_id}")
    return template
