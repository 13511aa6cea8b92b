from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from core import (
    AudioArtifact,
    BatchOptions,
    BatchResult,
    ItemResult,
    JobState,
    PostSummary,
    ProfileRecord,
    VideoJob,
)
from utils.exceptions import JobFailure


def test_profile_identifier_is_required_and_frozen() -> None:
    with pytest.raises(PydanticValidationError):
        ProfileRecord(identifier="   ")

    profile = ProfileRecord(identifier=" https://www.linkedin.com/in/alice ")
    assert profile.identifier == "https://www.linkedin.com/in/alice"
    with pytest.raises(PydanticValidationError):
        profile.identifier = "other"


def test_completeness_counts_only_present_fields() -> None:
    assert ProfileRecord(identifier="a").completeness == 0
    profile = ProfileRecord(identifier="a", name="Alice", headline="CEO", connections=5, posts=[PostSummary(text="hi")])
    assert profile.completeness == 40


def test_network_size_prefers_the_larger_count() -> None:
    assert ProfileRecord(identifier="a", connections=500, followers=1200).network_size == 1200
    assert ProfileRecord(identifier="a", connections=500).network_size == 500
    assert ProfileRecord(identifier="a").network_size is None


def test_batch_options_blank_callback_is_none() -> None:
    assert BatchOptions(callback_url="   ").callback_url is None
    assert BatchOptions(callback_url=" https://hooks.test ").callback_url == "https://hooks.test"


def test_failed_item_payload_has_placeholders() -> None:
    payload = ItemResult(identifier="a", error="profile not found").to_payload()

    assert payload == {
        "profileId": "a",
        "name": "Unknown",
        "persona": "Unknown",
        "confidence": 0,
        "roastScript": "",
        "audioBase64": "",
        "mimeType": "",
        "success": False,
        "error": "profile not found",
    }


def test_batch_payload_counts_videos_only_when_requested() -> None:
    video = VideoJob(job_id="tlk_1", state=JobState.DONE, result_url="https://cdn.test/v.mp4", waited_s=42.7)
    item = ItemResult(identifier="a", success=True, audio=AudioArtifact(identifier="a", data=b"xyz"), video=video)

    with_video = BatchResult(results=[item, ItemResult(identifier="b")], video_requested=True).to_payload()
    without_video = BatchResult(results=[item]).to_payload()

    assert with_video["processed"] == 2
    assert with_video["successful"] == 1
    assert with_video["videosGenerated"] == 1
    assert with_video["results"][0]["processingTime"] == "42 seconds"
    assert with_video["results"][0]["audioBase64"] == "eHl6"
    assert "videosGenerated" not in without_video


def test_raise_for_state() -> None:
    VideoJob(job_id="t", state=JobState.DONE, result_url="https://cdn.test/v.mp4").raise_for_state()

    with pytest.raises(JobFailure) as excinfo:
        VideoJob(job_id="t", state=JobState.REJECTED).raise_for_state()
    assert excinfo.value.state == "rejected"
    assert "content policy" in excinfo.value.message

    with pytest.raises(JobFailure, match="still processing"):
        VideoJob(job_id="t", state=JobState.PROCESSING).raise_for_state()
