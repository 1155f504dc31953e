"""
Unit tests for command-line argument handling.
"""

import datetime
import json

import pytest

from invoice_pipeline.analytics import AnalyticsEngine
from invoice_pipeline.cli.admin_cli import ANALYTICS_COMMANDS, build_filters, build_parser
from invoice_pipeline.cli.common import print_json
from invoice_pipeline.config import PipelineSettings


@pytest.fixture
def parser():
    return build_parser(PipelineSettings())


class TestAdminParser:
    """Tests for the admin CLI parser and filter building"""

    def test_filters_from_arguments(self, parser):
        args = parser.parse_args([
            "amounts-by-status",
            "--supplier-id", "S1",
            "--supplier-id", "S2",
            "--start-date", "2024-03-01",
            "--end-date", "2024-03-31",
            "--status-id", "2",
        ])

        filters = build_filters(args)

        assert filters.supplier_ids == ["S1", "S2"]
        assert filters.start_date == datetime.date(2024, 3, 1)
        assert filters.end_date == datetime.date(2024, 3, 31)
        assert filters.status_id == 2

    def test_no_filters(self, parser):
        filters = build_filters(parser.parse_args(["monthly-totals"]))

        assert filters.supplier_ids is None
        assert not filters.has_date_range

    def test_half_open_date_range_rejected(self, parser):
        args = parser.parse_args(["overdue-trend", "--start-date", "2024-03-01"])

        with pytest.raises(ValueError, match="start_date and end_date"):
            build_filters(args)

    def test_weekly_metrics_has_no_date_arguments(self, parser):
        with pytest.raises(SystemExit):
            parser.parse_args(["weekly-metrics", "--start-date", "2024-03-01"])

    def test_every_analytics_command_maps_to_engine_method(self):
        for method in ANALYTICS_COMMANDS.values():
            assert callable(getattr(AnalyticsEngine, method))

    def test_clear_requires_flag_to_be_parsed(self, parser):
        assert parser.parse_args(["clear"]).yes is False
        assert parser.parse_args(["clear", "--yes"]).yes is True

    def test_database_arguments_default_from_settings(self):
        settings = PipelineSettings()
        settings.database.host = "db.internal"

        args = build_parser(settings).parse_args(["suppliers"])

        assert args.db_host == "db.internal"
        assert args.db_port == 5432


def test_print_json_serializes_dates(capsys):
    print_json({"day": datetime.date(2024, 3, 1)})

    assert json.loads(capsys.readouterr().out) == {"day": "2024-03-01"}
