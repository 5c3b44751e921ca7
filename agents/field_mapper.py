"""
Field mapping — turn an ApplicationRecord into the human-readable values
that fill report template placeholders.

Pure and total: every key has a fallback literal, so mapping never fails.
Empty or whitespace-only source values count as absent.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List

from agents.ingestion import ApplicationRecord

NOT_SPECIFIED = "Not specified"


@dataclass(frozen=True)
class FieldMap:
    """Placeholder values derived from one application record."""
    organization_name: str
    application_id: str
    application_name: str
    application_description: str
    application_status: str
    application_owner: str
    business_owner: str
    application_location: str
    application_category: str
    application_tier: str
    application_area: str
    portal_type: str
    report_owner: str
    stream_leader: str
    dependencies: str
    integration_points: str
    dependency_list: str
    context_information: str
    tco: str
    capex: str
    opex: str
    vendor: str
    license_info: str
    license_start: str
    license_end: str
    license_utilization: str
    license_status: str
    capabilities: str
    recommendations: str

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


def _or(value: str, default: str) -> str:
    value = (value or "").strip()
    return value if value else default


def format_dependencies(record: ApplicationRecord) -> List[str]:
    """``"{name} ({interface})"`` for every dependency slot with a name."""
    return [
        f"{name.strip()} ({_or(interface, 'N/A')})"
        for name, interface in record.dependency_slots()
        if name and name.strip()
    ]


def build_field_map(record: ApplicationRecord) -> FieldMap:
    """Map a record to template values."""
    deps = format_dependencies(record)

    organization = _or(record.organization_name, "the organization")
    portal = _or(record.portal_type, "portal").lower()

    used = _or(record.license_units_used, "")
    total = _or(record.license_units, "")
    if used and total:
        utilization = f"{used} of {total} licenses used"
    else:
        utilization = NOT_SPECIFIED

    return FieldMap(
        organization_name=organization,
        application_id=_or(record.application_id, "N/A"),
        application_name=_or(record.application_name, "Unnamed Application"),
        application_description=_or(record.application_description, "No description provided."),
        application_status=_or(record.application_status, "Unknown"),
        application_owner=_or(record.application_owner, NOT_SPECIFIED),
        business_owner=_or(record.business_owner, NOT_SPECIFIED),
        application_location=_or(record.application_location, NOT_SPECIFIED),
        application_category=_or(record.application_category, "Uncategorized"),
        application_tier=_or(record.application_tier, "N/A"),
        application_area=_or(record.application_area, "N/A"),
        portal_type=portal,
        report_owner=_or(record.report_owner, "Enterprise Architecture"),
        stream_leader=_or(record.stream_leader, NOT_SPECIFIED),
        dependencies=", ".join(deps) or "None",
        integration_points=(
            f"Integrates with {len(deps)} external systems"
            if deps else "No external integrations"
        ),
        dependency_list=(
            "\n".join(f"{i}. {dep}" for i, dep in enumerate(deps, start=1))
            if deps else "No dependencies identified"
        ),
        context_information=(
            f"This application operates within {organization}'s technology "
            f"landscape, serving as a {portal}."
        ),
        tco=_or(record.application_tco, "0"),
        capex=_or(record.application_capex, "0"),
        opex=_or(record.application_opex, "0"),
        vendor=_or(record.application_vendor, NOT_SPECIFIED),
        license_info=_or(record.license_name, NOT_SPECIFIED),
        license_start=_or(record.license_start_date, NOT_SPECIFIED),
        license_end=_or(record.license_end_date, NOT_SPECIFIED),
        license_utilization=utilization,
        license_status=_or(record.license_status, "N/A"),
        capabilities=(
            "This application supports core business operations within the "
            f"{_or(record.application_area, 'relevant')} domain."
        ),
        recommendations=(
            "Based on the analysis, consider monitoring license utilization "
            f"({_or(record.license_status, 'N/A')}) and evaluating integration "
            "architecture for optimization opportunities."
        ),
    )
