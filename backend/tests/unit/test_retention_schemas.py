"""Unit tests for video retention schemas."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from recovery_portal.retention.schemas import (
    RequiredDownloaderType,
    VideoCleanupResult,
    VideoDownloadResult,
    VideoRecord,
    VideoRetentionInfo,
    VideoRetentionStatus,
)

UPLOADED_AT = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


def make_record(**overrides) -> VideoRecord:
    fields = dict(
        file_path="uploads/7/a.mp4",
        file_name="a.mp4",
        uploaded_at=UPLOADED_AT,
        uploaded_by_user_id="admin-1",
        uploaded_by_admin=True,
        document_id=1,
        required_downloader_type=RequiredDownloaderType.USER,
    )
    fields.update(overrides)
    return VideoRecord(**fields)


class TestRequiredDownloaderType:
    """Test required-party role logic."""

    def test_opposite_of_uploader(self):
        assert RequiredDownloaderType.opposite_of(uploaded_by_admin=True) == RequiredDownloaderType.USER
        assert RequiredDownloaderType.opposite_of(uploaded_by_admin=False) == RequiredDownloaderType.ADMIN

    @pytest.mark.parametrize("required, is_admin, expected", [
        (RequiredDownloaderType.ADMIN, True, True),
        (RequiredDownloaderType.ADMIN, False, False),
        (RequiredDownloaderType.USER, False, True),
        (RequiredDownloaderType.USER, True, False),
    ])
    def test_matches(self, required, is_admin, expected):
        assert required.matches(is_admin) is expected


class TestVideoRecord:
    """Test VideoRecord validation."""

    def test_defaults(self):
        record = make_record()

        assert record.downloaded_by_required_party is False
        assert record.downloaded_at is None
        assert record.organisation_id is None
        assert record.case_id is None

    def test_flag_without_timestamp_rejected(self):
        with pytest.raises(ValidationError) as exc:
            make_record(downloaded_by_required_party=True)

        assert "downloadedAt must be set" in str(exc.value)

    def test_timestamp_without_flag_rejected(self):
        with pytest.raises(ValidationError):
            make_record(downloaded_at=UPLOADED_AT)

    def test_serializes_with_camel_case_keys(self):
        data = make_record(organisation_id=7).model_dump(mode="json", by_alias=True)

        assert set(data.keys()) == {
            "filePath", "fileName", "uploadedAt", "uploadedByUserId", "uploadedByAdmin",
            "documentId", "organisationId", "caseId", "downloadedByRequiredParty",
            "downloadedAt", "requiredDownloaderType",
        }
        assert data["requiredDownloaderType"] == "user"
        assert data["organisationId"] == 7

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError):
            make_record(required_downloader_type="viewer")


class TestResults:
    """Test result schemas."""

    def test_download_result_defaults_to_no_transition(self):
        result = VideoDownloadResult()

        assert result.was_required_download is False
        assert result.retention_started is False
        assert result.model_dump(by_alias=True) == {
            "wasRequiredDownload": False,
            "retentionStarted": False,
        }

    def test_retention_info_rejects_negative_days(self):
        with pytest.raises(ValidationError):
            VideoRetentionInfo(
                is_tracked=True,
                days_remaining=-1,
                status=VideoRetentionStatus.AWAITING_DOWNLOAD,
            )

    def test_retention_info_status_values(self):
        assert [s.value for s in VideoRetentionStatus] == [
            "awaiting_download", "retention_countdown", "not_tracked",
        ]

    def test_cleanup_result_has_errors(self):
        assert not VideoCleanupResult(deleted=3).has_errors
        assert VideoCleanupResult(deleted=1, errors=1).has_errors

    def test_cleanup_result_rejects_negative_counts(self):
        with pytest.raises(ValidationError):
            VideoCleanupResult(deleted=-1)
