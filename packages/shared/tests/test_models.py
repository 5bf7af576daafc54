"""Tests for boundary models, settings and the error hierarchy."""

from pathlib import Path

import pytest
from asset_compute_shared.asset_models import (
    ComputeResult,
    InvocationParams,
    MultipartTarget,
    Rendition,
    RenditionDescriptor,
    SourceDescriptor,
    local_file_name,
    rendition_name,
    unique_rendition_names,
)
from asset_compute_shared.errors import (
    AssetComputeError,
    CallbackFailedError,
    DownloadFailedError,
    InvalidUrlError,
    MissingUrlError,
    TransferFailedError,
    UnsupportedPipelineModeError,
)
from asset_compute_shared.settings import WorkerSettings
from pydantic import ValidationError

# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


class TestDescriptors:
    def test_source_from_string(self):
        source = SourceDescriptor.model_validate("https://example.com/in.png")
        assert source.url == "https://example.com/in.png"

    def test_source_keeps_extra_fields(self):
        source = SourceDescriptor.model_validate({"url": "https://x.com/a", "etag": "abc"})
        assert source.model_dump()["etag"] == "abc"

    def test_params_parse_nested_shapes(self):
        params = InvocationParams.model_validate(
            {
                "source": "https://example.com/in.png",
                "renditions": [
                    {"fmt": "png", "target": "https://example.com/out.png", "width": 100},
                    {"target": {"urls": ["https://example.com/p1", "https://example.com/p2"]}},
                    {"target": ["https://example.com/p1"], "pipeline": True},
                ],
            }
        )
        assert params.source.url == "https://example.com/in.png"
        assert params.renditions[0].model_dump()["width"] == 100
        assert isinstance(params.renditions[1].target, MultipartTarget)
        assert params.renditions[2].pipeline
        assert params.flags.disable_source_download is False

    def test_params_require_source(self):
        with pytest.raises(ValidationError):
            InvocationParams.model_validate({"renditions": []})

    def test_params_are_immutable(self):
        params = InvocationParams(source=SourceDescriptor(url="https://x.com/a"))
        with pytest.raises(ValidationError):
            params.transformer_catalog_ref = "catalog"

    def test_with_flags_returns_copy(self):
        params = InvocationParams(source=SourceDescriptor(url="https://x.com/a"))
        updated = params.with_flags(unit_test_mode=True)
        assert updated.flags.unit_test_mode
        assert not params.flags.unit_test_mode


@pytest.mark.parametrize(
    "descriptor,expected",
    [
        (RenditionDescriptor(name="thumb.png"), "thumb.png"),
        (RenditionDescriptor(name="../../etc/thumb.png"), "thumb.png"),
        (RenditionDescriptor(fmt="jpg"), "rendition3.jpg"),
        (RenditionDescriptor(), "rendition3"),
    ],
)
def test_rendition_name(descriptor: RenditionDescriptor, expected: str):
    assert rendition_name(3, descriptor) == expected


@pytest.mark.parametrize("name", [".", "..", "a/..", ""])
def test_rendition_name_ignores_unusable_names(name: str):
    assert rendition_name(1, RenditionDescriptor(name=name, fmt="png")) == "rendition1.png"
    assert local_file_name(name) is None


def test_unique_rendition_names():
    descriptors = [
        RenditionDescriptor(name="thumb.png"),
        RenditionDescriptor(name="thumb.png"),
        RenditionDescriptor(name="1-thumb.png"),
        RenditionDescriptor(fmt="png"),
    ]
    assert unique_rendition_names(descriptors) == [
        "thumb.png",
        "1-thumb.png",
        "2-1-thumb.png",
        "rendition3.png",
    ]


def test_rendition_from_descriptor(tmp_path):
    descriptor = RenditionDescriptor.model_validate(
        {"fmt": "png", "mimetype": "image/png", "target": "https://x.com/out", "width": 64}
    )

    rendition = Rendition.from_descriptor(0, descriptor, tmp_path)

    assert rendition.name == "rendition0.png"
    assert rendition.path == tmp_path / "rendition0.png"
    assert rendition.directory == tmp_path
    assert rendition.target == "https://x.com/out"
    assert rendition.mimetype == "image/png"
    assert rendition.instructions["width"] == 64
    assert "target" not in rendition.instructions


def test_compute_result_defaults():
    result = ComputeResult(success=True, message="done")
    assert result.renditions == []
    assert result.route == ""


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults(self):
        settings = WorkerSettings.from_env({})
        assert not settings.unit_test_mode
        assert not settings.disable_retries
        assert settings.transformer_catalog_ref is None
        assert settings.max_attempts == 3

    def test_reads_environment(self):
        settings = WorkerSettings.from_env(
            {
                "ASSET_COMPUTE_UNIT_TEST_MODE": "true",
                "ASSET_COMPUTE_DISABLE_RETRIES": "1",
                "ASSET_COMPUTE_TRANSFORMER_CATALOG": "catalog://prod",
                "ASSET_COMPUTE_INPUT_ROOT": "/in",
                "ASSET_COMPUTE_WORK_ROOT": "/work",
                "ASSET_COMPUTE_MAX_ATTEMPTS": "5",
            }
        )
        assert settings.unit_test_mode
        assert settings.disable_retries
        assert settings.transformer_catalog_ref == "catalog://prod"
        assert settings.input_root == Path("/in")
        assert settings.work_root == Path("/work")
        assert settings.max_attempts == 5

    @pytest.mark.parametrize("value", ["0", "false", "", "no"])
    def test_falsy_flags(self, value):
        settings = WorkerSettings.from_env({"ASSET_COMPUTE_UNIT_TEST_MODE": value})
        assert not settings.unit_test_mode


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    def test_reasons(self):
        assert InvalidUrlError("x").reason == "InvalidUrl"
        assert MissingUrlError().reason == "MissingUrl"
        assert DownloadFailedError("GET", "u").reason == "DownloadFailed"
        assert CallbackFailedError("boom").reason == "CallbackFailed"
        assert UnsupportedPipelineModeError("no").reason == "UnsupportedPipelineMode"

    def test_missing_url_is_an_invalid_url(self):
        assert isinstance(MissingUrlError("x"), InvalidUrlError)

    def test_transfer_errors_are_retryable(self):
        assert TransferFailedError("GET", "u", status=503).retryable
        assert not InvalidUrlError("x").retryable

    def test_transfer_message_without_status(self):
        error = TransferFailedError("PUT", "https://x.com/a", detail="ConnectError")
        assert error.message == "PUT 'https://x.com/a' failed: ConnectError"

    def test_transfer_message_names_part(self):
        error = TransferFailedError("PUT", "https://x.com/a", status=500, part=(2, 3))
        assert error.part == (2, 3)
        assert error.message == "PUT part 2/3 'https://x.com/a' failed with status 500"

    def test_with_params_keeps_first(self):
        error = AssetComputeError("boom")
        error.with_params({"a": 1}).with_params({"b": 2})
        assert error.params == {"a": 1}

    def test_to_dict(self):
        error = InvalidUrlError("http://x.com", params={"source": "http://x.com"})
        assert error.to_dict() == {
            "reason": "InvalidUrl",
            "message": "Invalid Https Url: http://x.com",
            "params": {"source": "http://x.com"},
        }
        assert str(error) == "Invalid Https Url: http://x.com"
