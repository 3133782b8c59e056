"""Re-checking stored findings against their issuing services."""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence

from leakguard.core.dedup import flatten_secret_value
from leakguard.core.models import Finding, Validity
from leakguard.core.repository import FindingsRepository

logger = logging.getLogger(__name__)


def validation_parts(finding: Finding, fields: Sequence[str] = ()) -> Optional[List[str]]:
    """
    Values to pass to the family validator, in order.

    Returns None when a required field is missing from the stored value.
    """
    values = flatten_secret_value(finding.secret_value)
    if not fields:
        return [found[0] for found in values.values()] or None
    parts = []
    for name in fields:
        found = values.get(name)
        if not found:
            return None
        parts.append(found[0])
    return parts


def _validation_fields(family: str) -> Sequence[str]:
    from leakguard.detectors import DETECTOR_CLASSES

    detector_cls = DETECTOR_CLASSES.get(family)
    return detector_cls.validation_fields if detector_cls else ()


async def check_finding(finding: Finding, validators: Mapping) -> Validity:
    """Ask the family validator whether a stored finding is still live."""
    validator = validators.get(finding.secret_type)
    if validator is None:
        return Validity.NO_CHECKER

    parts = validation_parts(finding, _validation_fields(finding.secret_type))
    if parts is None:
        logger.warning("Stored %s finding is missing validation fields", finding.secret_type)
        return Validity.FAILED_TO_CHECK

    try:
        result = await validator.validate(*parts)
    except Exception as e:
        logger.warning("%s validator raised: %s", finding.secret_type, e)
        return Validity.FAILED_TO_CHECK
    if not result.checked:
        return Validity.FAILED_TO_CHECK
    return Validity.VALID if result.valid else Validity.INVALID


async def revalidate_finding(
    finding: Finding,
    repository: FindingsRepository,
    validators: Optional[Mapping] = None,
) -> Finding:
    """
    Re-run validation for a stored finding and record the outcome.

    Args:
        finding: Finding to check
        repository: Store holding the finding
        validators: Validators keyed by family; defaults to the built-in ones

    Returns:
        The finding as stored after the update
    """
    if validators is None:
        from leakguard.validators import create_validator

        validator = create_validator(finding.secret_type)
        validators = {finding.secret_type: validator} if validator else {}

    validity = await check_finding(finding, validators)
    validated_at = datetime.now(timezone.utc)
    if validity != finding.validity:
        logger.info("%s finding %s: %s -> %s", finding.secret_type, finding.fingerprint[:12],
                    finding.validity.value, validity.value)

    updated: Dict[str, Finding] = {}

    def apply(current: List[Finding]) -> List[Finding]:
        for stored in current:
            if stored.fingerprint == finding.fingerprint:
                stored.validity = validity
                stored.validated_at = validated_at
                updated["finding"] = stored
        return current

    await repository.update(apply)
    if "finding" not in updated:
        # No longer stored; report the outcome on the caller's copy
        finding.validity = validity
        finding.validated_at = validated_at
        return finding
    return updated["finding"]


async def revalidate_all(
    repository: FindingsRepository,
    validators: Optional[Mapping] = None,
) -> List[Finding]:
    """Revalidate every stored finding, one at a time."""
    return [
        await revalidate_finding(finding, repository, validators)
        for finding in await repository.get_existing()
    ]
