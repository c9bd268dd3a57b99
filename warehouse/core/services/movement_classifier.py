"""
Return/movement classifier.

Maps a raw ledger row onto the labels reports print, its stock sign and the
financial bucket it contributes to. Pure functions, no I/O.
"""

from warehouse.core.entities.movement import DestinationType, Movement, MovementKind
from warehouse.core.entities.report import (
    Classification,
    DisplayType,
    ReportBucket,
    ReportMovementType,
)

SUPPLIER_LABEL = "Fornecedor"
EMPLOYEE_LABEL = "Funcionário"
THIRD_PARTY_LABEL = "Terceiro"

_DISPLAY_TYPES: dict[MovementKind, DisplayType] = {
    MovementKind.SUPPLIER_ENTRY: DisplayType.ENTRY,
    MovementKind.EMPLOYEE_RETURN: DisplayType.RETURN,
    MovementKind.THIRD_PARTY_RETURN: DisplayType.RETURN,
    MovementKind.EXIT: DisplayType.EXIT,
}

_BUCKETS: dict[MovementKind, ReportBucket] = {
    MovementKind.SUPPLIER_ENTRY: ReportBucket.PURCHASES,
    MovementKind.EMPLOYEE_RETURN: ReportBucket.RETURNS,
    MovementKind.THIRD_PARTY_RETURN: ReportBucket.RETURNS,
    MovementKind.EXIT: ReportBucket.EXITS,
}

_REPORT_TYPES: dict[ReportMovementType, DisplayType] = {
    ReportMovementType.ENTRY: DisplayType.ENTRY,
    ReportMovementType.EXIT: DisplayType.EXIT,
    ReportMovementType.RETURN: DisplayType.RETURN,
}


def role_label(movement: Movement) -> str:
    """Generic label of the party on the other side of a row."""
    kind = movement.kind
    if kind == MovementKind.SUPPLIER_ENTRY:
        return SUPPLIER_LABEL
    if kind == MovementKind.THIRD_PARTY_RETURN:
        return THIRD_PARTY_LABEL
    if kind == MovementKind.EXIT and movement.destination_type == DestinationType.THIRD_PARTY:
        return THIRD_PARTY_LABEL
    return EMPLOYEE_LABEL


def classify(movement: Movement, party_name: str | None = None) -> Classification:
    """
    Classify a ledger row.

    Args:
        movement: Raw ledger row
        party_name: Name of the supplier, employee or third party, when known

    Returns:
        Classification with exactly one display type and one report bucket
    """
    kind = movement.kind
    return Classification(
        kind=kind,
        display_type=_DISPLAY_TYPES[kind],
        label=party_name or role_label(movement),
        stock_effect=kind.stock_effect,
        report_bucket=_BUCKETS[kind],
    )


def matches_report_type(classification: Classification, report_type: ReportMovementType) -> bool:
    """True when a classified row belongs under a report type filter."""
    return classification.display_type == _REPORT_TYPES[report_type]
