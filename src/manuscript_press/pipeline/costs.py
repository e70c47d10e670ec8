"""Cost breakdown of a publish call."""

from manuscript_press.config import CostSchedule
from schemas.project import CostBreakdown, PublishingProject


def compute_costs(project: PublishingProject, schedule: CostSchedule) -> CostBreakdown:
    """Price a project from the fixed cost schedule.

    One single ISBN per claimed identifier; the registration and catalog
    fees apply when those filings were prepared, and the cover fee when a
    cover was generated. Packaging and submission are free.
    """
    return CostBreakdown(
        identifier_costs=len(project.identifiers) * schedule.isbn_single,
        registration_costs=schedule.copyright_registration if project.registration else 0.0,
        catalog_costs=schedule.catalog_number if project.catalog_number else 0.0,
        cover_costs=schedule.cover_generation if project.cover else 0.0,
    )
