"""
Tests for hiring_pipeline.core.pipeline.export.
"""

import csv
from io import StringIO

import pytest
from bson import ObjectId

from hiring_pipeline.core.errors import NotFoundError
from hiring_pipeline.utils.constants import CSV_EXPORT_HEADERS, ApplicationStatus as S


def _rows(text):
    return list(csv.reader(StringIO(text)))


class TestApplicantExporter:
    def test_header_only_for_empty_job(self, exporter, job):
        text = exporter.to_csv(job.id)
        assert _rows(text) == [list(CSV_EXPORT_HEADERS)]
        assert text.startswith('"Name","Email","Phone"')

    def test_external_row(self, exporter, engine, make_application, job):
        app = make_application(name="Lena Fischer", email="lena@example.com", phone="+49 30 1234")
        engine.transition(app.id, S.SHORTLISTED, "recruiter-1")
        engine.record_score(app.id, 91)

        [_, row] = _rows(exporter.to_csv(str(job.id)))
        assert row == [
            "Lena Fischer",
            "lena@example.com",
            "+49 30 1234",
            "EXTERNAL",
            "SHORTLISTED",
            "91",
            app.created_at.date().isoformat(),
        ]

    def test_internal_row_uses_placeholders(self, exporter, make_application, job):
        make_application(user_id="user-5")
        [_, row] = _rows(exporter.to_csv(job.id))
        assert row[:3] == ["N/A", "N/A", "N/A"]
        assert row[3] == "INTERNAL"
        assert row[5] == "N/A"

    def test_quotes_are_escaped(self, exporter, make_application, job):
        make_application(name='Jo "JJ" Smith, Jr.')
        text = exporter.to_csv(job.id)
        assert '"Jo ""JJ"" Smith, Jr."' in text
        assert _rows(text)[1][0] == 'Jo "JJ" Smith, Jr.'

    def test_only_that_jobs_applicants(self, exporter, make_job, make_application, job):
        other = make_job()
        make_application()
        make_application(for_job=other)
        assert len(_rows(exporter.to_csv(job.id))) == 2

    def test_unknown_job(self, exporter):
        with pytest.raises(NotFoundError):
            exporter.to_csv(ObjectId())

    def test_write_file(self, exporter, make_application, job, tmp_path):
        make_application()
        path = exporter.write(job.id, tmp_path / "out" / "applicants.csv")
        assert path.exists()
        assert len(_rows(path.read_text(encoding="utf-8"))) == 2
