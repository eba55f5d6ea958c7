"""Tests for the text report: section order, formatting and content."""

import pytest

from station_stats.config import ReportOptions
from station_stats.data_model import Dataset
from station_stats.engine import StatisticalReportEngine
from station_stats.errors import EmptyDatasetError
from station_stats.example_data import rainfall_dataset
from station_stats.report import (
    SECTION_AGGREGATE, SECTION_GROUPS, SECTION_ORDER, SECTION_RANKINGS,
    SECTION_REGIONS, SECTION_VARIABILITY, SECTION_WARNINGS, build_report,
    render_report,
)
from station_stats.stats_engine import (
    compute_aggregate, compute_dataset_stats, compute_group_stats,
)


def _report(dataset=None, **option_kwargs):
    options = ReportOptions(**option_kwargs)
    return StatisticalReportEngine(options).report(dataset or rainfall_dataset())


def test_sections_appear_in_fixed_order():
    text = _report().render()
    positions = [text.index(f"\n{title}\n") for title in SECTION_ORDER]
    assert positions == sorted(positions)


def test_report_is_deterministic():
    assert _report().render() == _report().render()


def test_render_starts_and_ends_with_separator():
    text = _report(title="RAINFALL").render()
    lines = text.splitlines()
    assert lines[0] == lines[4] == lines[-1] == "=" * 64
    assert lines[1] == "RAINFALL"
    assert text.endswith("\n")


def test_header_names_std_mode_and_threshold():
    report = _report(std_mode="population")
    assert report.header_lines == (
        "Standard deviation: population",
        "Warning threshold: mean > 10.00",
    )


def test_group_table_rows_sorted_with_status():
    lines = _report().section(SECTION_GROUPS).lines
    rows = lines[2:]
    assert [r.split()[0] for r in rows] == ["Bayelsa", "Enugu", "Kano", "Lagos", "Rivers"]
    kano = next(r for r in rows if r.startswith("Kano"))
    assert kano.endswith("  OK")
    assert "3.50" in kano
    lagos = next(r for r in rows if r.startswith("Lagos"))
    assert lagos.endswith("  WARNING")


def test_decimals_option_applies_everywhere():
    text = _report(decimals=3).render()
    assert "12.500" in text
    assert "Pooled mean (all readings): 13.750" in text


def test_units_are_appended_to_prose_values():
    text = _report(units="mm").render()
    assert "Total:                      275.00 mm" in text


def test_warning_section_lists_flagged_by_mean():
    lines = _report().section(SECTION_WARNINGS).lines
    assert lines[0] == "4 of 5 group(s) exceed the threshold (mean > 10.00):"
    assert [l.split()[0] for l in lines[1:]] == ["Bayelsa", "Rivers", "Lagos", "Enugu"]


def test_warning_section_ge_boundary():
    dataset = Dataset.from_mapping({"a": [10, 10], "b": [1, 2]})
    gt = _report(dataset, comparison="gt").section(SECTION_WARNINGS).lines
    ge = _report(dataset, comparison="ge").section(SECTION_WARNINGS).lines
    assert gt == ("No groups exceed the threshold (mean > 10.00).",)
    assert ge[0] == "1 of 2 group(s) exceed the threshold (mean >= 10.00):"


def test_threshold_disabled():
    report = _report(threshold=None)
    assert report.section(SECTION_WARNINGS).lines == ("Threshold classification disabled.",)
    assert all(row.endswith("  -") for row in report.section(SECTION_GROUPS).lines[2:])
    assert len(report.header_lines) == 1


def test_aggregate_section_content():
    lines = _report().section(SECTION_AGGREGATE).lines
    assert "Pooled mean (all readings): 13.75" in lines
    assert "Mean of group means:        13.75" in lines
    assert "Group sizes are equal, so both means coincide." in lines
    assert "Highest reading:            23.00 (Bayelsa, reading 4)" in lines
    assert "Lowest reading:             2.00 (Kano, reading 3)" in lines
    assert "Spread of group means:      18.00" in lines


def test_aggregate_section_explains_unequal_sizes():
    dataset = Dataset.from_mapping({"a": [1, 2, 3], "b": [10]})
    lines = _report(dataset).section(SECTION_AGGREGATE).lines
    assert "Pooled mean (all readings): 4.00" in lines
    assert "Mean of group means:        6.00" in lines
    assert any(l.startswith("Group sizes differ") for l in lines)


def test_rankings_top_and_bottom():
    lines = _report(top_n=2).section(SECTION_RANKINGS).lines
    assert lines[0] == "Top 2 by mean (highest first):"
    assert lines[1].startswith("   1. Bayelsa")
    assert lines[2].startswith("   2. Rivers")
    assert lines[4] == "Bottom 2 by mean (lowest first):"
    assert lines[5].startswith("   1. Kano")
    assert lines[5].endswith("(range 2.00 to 5.00)")


def test_rankings_disabled():
    assert _report(top_n=0).section(SECTION_RANKINGS).lines == ("Rankings disabled.",)


def test_rankings_by_other_metric():
    lines = _report(rank_by="range", top_n=1).section(SECTION_RANKINGS).lines
    assert lines[0] == "Top 1 by range (highest first):"
    assert "Lagos" in lines[1]


def test_variability_rows_sorted_by_std():
    lines = _report().section(SECTION_VARIABILITY).lines
    rows = lines[3:]
    names = [r.split()[0] for r in rows]
    assert names == ["Bayelsa", "Enugu", "Kano", "Rivers", "Lagos"]
    assert rows[0].endswith("Very Stable")
    assert rows[-1].endswith("Moderately Stable")


def test_regional_summary():
    lines = _report().section(SECTION_REGIONS).lines
    headings = [l for l in lines if l and not l.startswith("  ")]
    assert headings == [
        "Eastern Region: average mean 11.50 | groups: 1 | warnings: 1",
        "Northern Region: average mean 3.50 | groups: 1 | warnings: 0",
        "Southern Region: average mean 17.92 | groups: 3 | warnings: 3",
    ]
    assert _report().sections[-1].title == SECTION_REGIONS


def test_regional_summary_can_be_disabled():
    assert _report(include_regions=False).section(SECTION_REGIONS) is None


def test_flat_series_has_no_regional_summary():
    report = _report(Dataset.flat([10, 20, 30, 40]))
    assert report.section(SECTION_REGIONS) is None
    assert len(report.sections) == 5


def test_render_report_matches_build_report():
    groups = compute_dataset_stats(rainfall_dataset())
    aggregate = compute_aggregate(groups)
    assert render_report(groups, aggregate) == build_report(groups, aggregate).render()


def test_empty_groups_raise():
    groups = compute_dataset_stats(rainfall_dataset())
    with pytest.raises(EmptyDatasetError):
        build_report({}, compute_aggregate(groups))


def test_regional_summary_uses_mapping_keys():
    # statistics built without a name, keyed only by the mapping
    groups = {
        "Lagos": compute_group_stats([12, 15], label="South"),
        "Rivers": compute_group_stats([18, 20], label="South"),
    }
    report = build_report(groups, compute_aggregate(groups))
    lines = report.section(SECTION_REGIONS).lines
    assert lines[0] == "South: average mean 16.25 | groups: 2 | warnings: 2"
    assert [l.split()[0] for l in lines[1:]] == ["Lagos", "Rivers"]


def test_mixed_std_modes_are_labelled_mixed():
    groups = {
        "a": compute_group_stats([1, 2], name="a", std_mode="sample"),
        "b": compute_group_stats([3, 5], name="b", std_mode="population"),
    }
    report = build_report(groups, compute_aggregate(groups))
    assert report.header_lines[0] == "Standard deviation: mixed"
    assert report.section(SECTION_VARIABILITY).lines[0].startswith("Bands on mixed std:")
