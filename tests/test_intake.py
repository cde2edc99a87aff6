from __future__ import annotations

from pathlib import Path

import pytest

from ghiblify.intake import (
    MAX_FILE_SIZE_BYTES,
    Accepted,
    CandidateFile,
    Rejected,
    RejectionReason,
    WidgetError,
    WidgetRejection,
    reason_for_code,
    validate_selection,
)


def _file(content_type="image/png", size=1024, name="photo.png") -> CandidateFile:
    return CandidateFile(filename=name, content_type=content_type, content=b"\x00" * size)


@pytest.mark.parametrize("content_type", ["image/jpeg", "image/png", "image/webp"])
def test_single_allowed_file_is_accepted(content_type: str) -> None:
    file = _file(content_type=content_type)

    outcome = validate_selection([file])

    assert outcome == Accepted(file)
    assert outcome.accepted is True


def test_file_at_exact_size_limit_is_accepted() -> None:
    file = _file(size=MAX_FILE_SIZE_BYTES)

    assert validate_selection([file]) == Accepted(file)


def test_file_over_size_limit_is_too_large() -> None:
    outcome = validate_selection([_file(size=MAX_FILE_SIZE_BYTES + 1)])

    assert outcome == Rejected(RejectionReason.TOO_LARGE, "File is too large. Maximum size is 5MB.")


@pytest.mark.parametrize("content_type", ["image/gif", "text/plain", None, ""])
def test_disallowed_type_is_invalid_type(content_type) -> None:
    outcome = validate_selection([_file(content_type=content_type)])

    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectionReason.INVALID_TYPE
    assert outcome.message == "Invalid file type. Please upload a JPG, PNG, or WEBP image."


def test_multiple_valid_files_are_too_many() -> None:
    outcome = validate_selection([_file(), _file(name="second.png")])

    assert outcome == Rejected(RejectionReason.TOO_MANY_FILES, "Please upload only one file at a time.")


def test_too_many_files_wins_over_individual_problems() -> None:
    bad = _file(content_type="text/plain", size=MAX_FILE_SIZE_BYTES + 1)
    rejection = WidgetRejection(bad, (WidgetError("file-invalid-type", "File type must be image/*"),))

    outcome = validate_selection([_file()], [rejection])

    assert outcome.reason is RejectionReason.TOO_MANY_FILES


def test_invalid_type_is_reported_before_too_large() -> None:
    outcome = validate_selection([_file(content_type="image/gif", size=MAX_FILE_SIZE_BYTES + 1)])

    assert outcome.reason is RejectionReason.INVALID_TYPE


def test_widget_codes_follow_evaluation_order() -> None:
    rejection = WidgetRejection(
        _file(),
        (
            WidgetError("file-too-large", "File is larger than 5242880 bytes"),
            WidgetError("file-invalid-type", "File type must be image/*"),
        ),
    )

    outcome = validate_selection(rejections=[rejection])

    assert outcome.reason is RejectionReason.INVALID_TYPE


def test_unknown_widget_code_is_other_with_widget_message() -> None:
    rejection = WidgetRejection(_file(), (WidgetError("file-custom-check", "Custom check failed"),))

    outcome = validate_selection(rejections=[rejection])

    assert outcome == Rejected(RejectionReason.OTHER, "Error: Custom check failed")


def test_widget_rejection_without_errors_is_other() -> None:
    outcome = validate_selection(rejections=[WidgetRejection(_file())])

    assert outcome == Rejected(RejectionReason.OTHER, "File selection failed. Please try again.")


def test_empty_selection_asks_for_a_file() -> None:
    outcome = validate_selection()

    assert outcome == Rejected(RejectionReason.OTHER, "Please select an image file first.")


def test_widget_code_mapping() -> None:
    assert reason_for_code("file-invalid-type") is RejectionReason.INVALID_TYPE
    assert reason_for_code("file-too-large") is RejectionReason.TOO_LARGE
    assert reason_for_code("too-many-files") is RejectionReason.TOO_MANY_FILES
    assert reason_for_code("file-too-small") is RejectionReason.OTHER


def test_validation_is_repeatable() -> None:
    files = (_file(content_type="image/gif"),)

    assert validate_selection(files) == validate_selection(files)


def test_candidate_from_path_guesses_type(tmp_path: Path) -> None:
    path = tmp_path / "portrait.jpg"
    path.write_bytes(b"\xff\xd8\xff" + b"\x00" * 10)

    file = CandidateFile.from_path(path)

    assert file.filename == "portrait.jpg"
    assert file.content_type == "image/jpeg"
    assert file.size == 13
