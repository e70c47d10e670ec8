"""Publishing phase descriptors.

The pipeline runs these phases in order. Each phase's weight is the
cumulative progress percentage reached when it completes, so weights must
strictly increase and end at 100.
"""

from typing import NamedTuple


class PhaseDescriptor(NamedTuple):
    """Name and completion weight of one phase."""

    name: str
    weight: int


IDENTIFIER_ACQUISITION = "identifier-acquisition"
REGISTRATION = "registration"
CATALOG_NUMBER = "catalog-number"
PACKAGING = "packaging"
COVER = "cover"
METADATA_OPTIMIZATION = "metadata-optimization"
VALIDATION = "validation"
DESTINATION_SUBMISSION = "destination-submission"

PUBLISHING_PHASES: tuple[PhaseDescriptor, ...] = (
    PhaseDescriptor(IDENTIFIER_ACQUISITION, 10),
    PhaseDescriptor(REGISTRATION, 20),
    PhaseDescriptor(CATALOG_NUMBER, 30),
    PhaseDescriptor(PACKAGING, 50),
    PhaseDescriptor(COVER, 65),
    PhaseDescriptor(METADATA_OPTIMIZATION, 75),
    PhaseDescriptor(VALIDATION, 85),
    PhaseDescriptor(DESTINATION_SUBMISSION, 100),
)


def check_phases(phases: tuple[PhaseDescriptor, ...]) -> None:
    """Raise ValueError unless weights strictly increase within 1..100."""
    weights = [phase.weight for phase in phases]
    if not weights:
        raise ValueError("At least one phase is required")
    if any(b <= a for a, b in zip(weights, weights[1:])):
        raise ValueError(f"Phase weights must strictly increase: {weights}")
    if weights[0] < 1 or weights[-1] > 100:
        raise ValueError(f"Phase weights must lie within 1..100: {weights}")
    names = [phase.name for phase in phases]
    if len(set(names)) != len(names):
        raise ValueError(f"Phase names must be unique: {names}")


check_phases(PUBLISHING_PHASES)
