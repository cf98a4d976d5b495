import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from warrenform.models.core.resources import WarrenResourceSchema

logger = logging.getLogger(__name__)


@dataclass
class ResourceDiff:
    """Configurable attributes whose desired value differs from prior state."""

    update_fields: List[str] = field(default_factory=list)
    replace_fields: List[str] = field(default_factory=list)

    @property
    def requires_replace(self) -> bool:
        return len(self.replace_fields) > 0

    @property
    def has_changes(self) -> bool:
        return bool(self.update_fields or self.replace_fields)


@dataclass
class Drift:
    attribute: str
    recorded: Any
    observed: Any


def validate_desired(schema: WarrenResourceSchema, desired: Dict[str, Any]) -> None:
    """
    Reject a desired configuration that misses a required attribute or sets an
    attribute the platform computes on its own.

    :raises ValueError: with every offending attribute listed.
    """
    attributes = schema.properties.by_name()
    missing = [
        name for name in schema.required_attributes() if desired.get(name) is None
    ]
    not_configurable = sorted(
        name for name, value in desired.items()
        if value is not None and (name not in attributes or not attributes[name].configurable)
    )
    problems = []
    if missing:
        problems.append(f"missing required attributes: {', '.join(missing)}")
    if not_configurable:
        problems.append(f"attributes that cannot be configured: {', '.join(not_configurable)}")
    if problems:
        raise ValueError(f"Invalid {schema.type_name} configuration, {'; '.join(problems)}.")


def plan_changes(
    schema: WarrenResourceSchema,
    prior: Optional[Dict[str, Any]],
    desired: Dict[str, Any],
) -> ResourceDiff:
    """
    Split the differences between prior state and desired configuration into
    in-place updates and replacements.

    An unset (None) desired value is no change for a computed attribute, since the
    platform decides it. For a plain optional attribute it clears the value.
    """
    prior = prior or {}
    diff = ResourceDiff()
    for attribute in schema.properties.attributes():
        if not attribute.configurable:
            continue
        desired_value = desired.get(attribute.name)
        prior_value = prior.get(attribute.name)
        if desired_value is None:
            if attribute.computed or prior_value is None:
                continue
        elif desired_value == prior_value:
            continue
        if attribute.requires_replace:
            diff.replace_fields.append(attribute.name)
        else:
            diff.update_fields.append(attribute.name)
    if diff.has_changes:
        logger.debug(
            "Planned %s changes: update %s, replace %s.",
            schema.type_name,
            diff.update_fields,
            diff.replace_fields,
        )
    return diff


def detect_drift(
    schema: WarrenResourceSchema,
    recorded: Dict[str, Any],
    observed: Dict[str, Any],
) -> List[Drift]:
    """
    Compare recorded state with freshly observed state. Input-only attributes are
    skipped because the platform never reports them.
    """
    drifts = []
    for attribute in schema.properties.attributes():
        if attribute.input_only:
            continue
        recorded_value = recorded.get(attribute.name)
        observed_value = observed.get(attribute.name)
        if recorded_value != observed_value:
            drifts.append(Drift(attribute.name, recorded_value, observed_value))
    return drifts
