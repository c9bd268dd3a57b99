"""Tests for the return/movement classifier."""

import pytest

from warehouse.core.entities.movement import DestinationType, MovementKind, OriginType
from warehouse.core.entities.report import DisplayType, ReportBucket, ReportMovementType
from warehouse.core.services.movement_classifier import (
    EMPLOYEE_LABEL,
    SUPPLIER_LABEL,
    THIRD_PARTY_LABEL,
    classify,
    matches_report_type,
    role_label,
)


class TestClassify:
    def test_supplier_entry(self, make_entry):
        c = classify(make_entry(10, "5"))

        assert c.kind == MovementKind.SUPPLIER_ENTRY
        assert c.display_type == DisplayType.ENTRY
        assert c.label == SUPPLIER_LABEL
        assert c.stock_effect == 1
        assert c.report_bucket == ReportBucket.PURCHASES
        assert not c.cost_center_relevant

    def test_employee_return_entry(self, make_entry):
        c = classify(make_entry(2, "5", origin_type=OriginType.EMPLOYEE_RETURN))

        assert c.display_type == DisplayType.RETURN
        assert c.label == EMPLOYEE_LABEL
        assert c.stock_effect == 1
        assert c.report_bucket == ReportBucket.RETURNS
        assert c.cost_center_relevant

    def test_third_party_return_entry(self, make_entry):
        c = classify(make_entry(2, "5", origin_type=OriginType.THIRD_PARTY_RETURN))

        assert c.kind == MovementKind.THIRD_PARTY_RETURN
        assert c.label == THIRD_PARTY_LABEL

    def test_plain_exit(self, make_exit):
        c = classify(make_exit(3, "5"))

        assert c.display_type == DisplayType.EXIT
        assert c.label == EMPLOYEE_LABEL
        assert c.stock_effect == -1
        assert c.report_bucket == ReportBucket.EXITS

    def test_exit_to_third_party(self, make_exit):
        c = classify(make_exit(3, destination_type=DestinationType.THIRD_PARTY))

        assert c.label == THIRD_PARTY_LABEL

    def test_legacy_exit_flagged_as_return_adds_stock(self, make_exit):
        c = classify(make_exit(3, is_return=True))

        assert c.kind == MovementKind.EMPLOYEE_RETURN
        assert c.display_type == DisplayType.RETURN
        assert c.stock_effect == 1
        assert c.report_bucket == ReportBucket.RETURNS

    def test_party_name_overrides_generic_label(self, make_entry):
        c = classify(make_entry(1, "5"), party_name="Acme Ltda")

        assert c.label == "Acme Ltda"

    def test_role_label_ignores_names(self, make_exit):
        assert role_label(make_exit(1, destination_type=DestinationType.THIRD_PARTY)) == (
            THIRD_PARTY_LABEL
        )


class TestMatchesReportType:
    @pytest.mark.parametrize(
        ("origin", "expected"),
        [
            (OriginType.SUPPLIER, ReportMovementType.ENTRY),
            (OriginType.EMPLOYEE_RETURN, ReportMovementType.RETURN),
            (OriginType.THIRD_PARTY_RETURN, ReportMovementType.RETURN),
        ],
    )
    def test_each_entry_falls_under_exactly_one_type(self, make_entry, origin, expected):
        c = classify(make_entry(1, "5", origin_type=origin))

        matching = [t for t in ReportMovementType if matches_report_type(c, t)]
        assert matching == [expected]

    def test_exit_only_matches_exit(self, make_exit):
        c = classify(make_exit(1))

        assert [t for t in ReportMovementType if matches_report_type(c, t)] == [
            ReportMovementType.EXIT
        ]
