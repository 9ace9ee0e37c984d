"""
Tests for hiring_pipeline.utils.constants: enums and pipeline groupings.
"""

from hiring_pipeline.utils.constants import (
    CSV_EXPORT_HEADERS,
    FUNNEL_STAGES,
    HIRED_EQUIVALENT_STATUSES,
    TERMINAL_STATUSES,
    ApplicationSource,
    ApplicationStatus,
    HistoryEntryType,
    JobStatus,
)


# ── Enum value correctness ──────────────────────────────────────────────────


class TestApplicationStatus:
    def test_all_values_present(self):
        expected = {
            "APPLIED",
            "VIEWED",
            "SCREENED",
            "SHORTLISTED",
            "INTERVIEW_SCHEDULED",
            "INTERVIEWED",
            "SELECTED",
            "APPOINTED",
            "HIRED",
            "REJECTED",
        }
        assert {s.value for s in ApplicationStatus} == expected

    def test_is_str_enum(self):
        assert ApplicationStatus.HIRED == "HIRED"


class TestOtherEnums:
    def test_sources(self):
        assert {s.value for s in ApplicationSource} == {"INTERNAL", "EXTERNAL"}

    def test_history_types(self):
        assert {t.value for t in HistoryEntryType} == {"STATUS", "NOTE", "RATING"}

    def test_job_statuses(self):
        assert JobStatus("OPEN") is JobStatus.OPEN


# ── Groupings ───────────────────────────────────────────────────────────────


class TestGroupings:
    def test_terminal(self):
        assert TERMINAL_STATUSES == {ApplicationStatus.HIRED, ApplicationStatus.REJECTED}

    def test_hired_equivalent(self):
        assert HIRED_EQUIVALENT_STATUSES == {
            ApplicationStatus.SELECTED,
            ApplicationStatus.APPOINTED,
            ApplicationStatus.HIRED,
        }

    def test_funnel_stage_names(self):
        assert [name for name, _ in FUNNEL_STAGES] == [
            "screened",
            "shortlisted",
            "interview_scheduled",
            "interviewed",
            "hired",
        ]

    def test_funnel_stages_are_disjoint(self):
        seen = set()
        for _, statuses in FUNNEL_STAGES:
            assert not (seen & statuses)
            seen |= statuses
        assert ApplicationStatus.REJECTED not in seen

    def test_csv_headers(self):
        assert CSV_EXPORT_HEADERS == (
            "Name",
            "Email",
            "Phone",
            "Source",
            "Status",
            "ATS Score",
            "Date Applied",
        )
