"""
Project document loader: YAML / JSON file -> validated ``ProjectData``.

Responsibilities:
- Load YAML (``yaml.safe_load``) or JSON; the top level must be a mapping.
- Import the engine modules so their field registrations run, then resolve
  every registered field along its candidate paths.
- Hard-fail on error-severity problems, log warning-severity ones and fall
  back to the registered default.

Accepted layouts (mixable):

- the UI's saved document: ``capexItems``, ``opexCashIn``, ``projectYears``, ...
- snake_case keys: ``capex_items``, ``project_years``, ...
- nested YAML::

    project:
      years: 5
      discount_rate_pct: 12
    capex: [...]
    opex:
      cash_in: [...]
      cash_out: [...]
      in_growth_pct: 3
      out_growth_pct: 2
"""

from __future__ import annotations

import copy
import importlib
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Union

import yaml

from feasibility.analytics.config_schema import get_required_fields, is_missing
from feasibility.project_types import ProjectData

logger = logging.getLogger(__name__)

# logical module name -> import path (import registers its fields)
_MODULE_IMPORTS: Dict[str, str] = {
    "cashflow": "feasibility.finance.cashflow",
    "discounting": "feasibility.finance.discounting",
}

DEFAULT_MODULES: Sequence[str] = tuple(_MODULE_IMPORTS)


class ScenarioConfigError(ValueError):
    """Project file could not be read as a mapping."""


class ConfigValidationError(RuntimeError):
    """Project document is missing required fields or has invalid ones."""


# ---------------------------------------------------------------------------
# Raw loading
# ---------------------------------------------------------------------------


def _load_raw_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Project config not found: {path}")

    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as f:
        if suffix in (".yml", ".yaml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ScenarioConfigError(f"Invalid JSON in {path}: {exc}") from exc
        else:
            raise ScenarioConfigError(
                f"Unsupported project config extension '{suffix}' for {path}"
            )

    if data is None:
        raise ScenarioConfigError(f"Empty configuration in file: {path}")

    if not isinstance(data, dict):
        raise ScenarioConfigError(
            f"Expected a mapping at top level of {path}, got {type(data).__name__}"
        )

    return data


# ---------------------------------------------------------------------------
# Validation / resolution
# ---------------------------------------------------------------------------


def ensure_modules_registered(modules: Sequence[str] = DEFAULT_MODULES) -> None:
    """Import the engine modules behind ``modules`` so their fields register."""
    for name in modules:
        module_path = _MODULE_IMPORTS.get(name)
        if module_path:
            importlib.import_module(module_path)


def resolve_project_fields(
    raw_config: Mapping[str, Any],
    config_path: str = "<memory>",
    modules: Sequence[str] = DEFAULT_MODULES,
) -> Dict[str, Any]:
    """
    Resolve every registered field of ``modules`` against ``raw_config``.

    Returns
    -------
    Dict[str, Any]
        ``{field name: value}`` with defaults filled in for missing optional
        fields and for warning-severity problems.

    Raises
    ------
    ConfigValidationError
        If any error-severity field is missing (when required) or fails its
        validator. All problems are reported in one message.
    """
    ensure_modules_registered(modules)

    resolved: Dict[str, Any] = {}
    problems: List[str] = []

    for m in modules:
        for spec in get_required_fields(m):
            value = spec.resolve(raw_config)
            path_labels = ", ".join(".".join(p) for p in spec.paths)

            if is_missing(value) or value is None:
                if spec.required and spec.severity == "error":
                    problems.append(f"{spec.name} missing (paths: {path_labels})")
                    continue
                if spec.required:
                    logger.warning(
                        "%s: '%s' not set; using default %r",
                        config_path,
                        spec.name,
                        spec.default,
                    )
                resolved[spec.name] = copy.deepcopy(spec.default)
                continue

            valid = True
            if spec.validator is not None:
                try:
                    valid = bool(spec.validator(value))
                except (TypeError, ValueError):
                    valid = False

            if valid:
                resolved[spec.name] = value
            elif spec.severity == "error":
                problems.append(f"{spec.name} invalid: {value!r} (paths: {path_labels})")
            else:
                logger.warning(
                    "%s: '%s' has invalid value %r; using default %r",
                    config_path,
                    spec.name,
                    value,
                    spec.default,
                )
                resolved[spec.name] = copy.deepcopy(spec.default)

    if problems:
        details = "; ".join(sorted(problems))
        raise ConfigValidationError(
            f"Config '{config_path}' is missing or has invalid required fields: {details}"
        )

    return resolved


def project_from_config(
    raw_config: Mapping[str, Any],
    config_path: str = "<memory>",
) -> ProjectData:
    """Validate an in-memory document and build the ``ProjectData`` snapshot."""
    fields = resolve_project_fields(raw_config, config_path=config_path)
    return ProjectData.from_dict(fields)


def load_project(path: Union[str, Path]) -> ProjectData:
    """
    Load and validate a project file.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ScenarioConfigError
        If the file is empty, not a mapping, or has an unsupported extension.
    ConfigValidationError
        If required fields are missing or invalid.
    """
    p = Path(path)
    raw = _load_raw_config(p)
    project = project_from_config(raw, config_path=str(p))
    logger.info(
        "Loaded project %s: %d capex, %d inflow, %d outflow items over %d years",
        p.name,
        len(project.capex_items),
        len(project.opex_cash_in),
        len(project.opex_cash_out),
        project.project_years,
    )
    return project


__all__ = [
    "ScenarioConfigError",
    "ConfigValidationError",
    "ensure_modules_registered",
    "resolve_project_fields",
    "project_from_config",
    "load_project",
]
