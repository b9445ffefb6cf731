"""Tests for activity interface and result types."""

from uuid import uuid4

import pytest

from flowstore.connector import (
    Activity,
    ActivityContext,
    ActivityOutput,
    ActivityResult,
    OutputType,
)


def make_context() -> ActivityContext:
    return ActivityContext(workflow_id=uuid4(), activity_id=uuid4(), activity_key="step1")


class TestActivityResult:
    """Test ActivityResult model."""

    def test_values_constructor(self):
        result = ActivityResult.values(
            [
                ActivityOutput(name="count", output_type=OutputType.VALUE, value=1),
                ActivityOutput(name="file", output_type=OutputType.FILE, value="{}"),
            ]
        )
        assert [out.name for out in result.outputs] == ["count", "file"]
        assert result.outputs[1].output_type == OutputType.FILE
        assert result.is_error is False

    def test_to_output_dict_includes_files(self):
        result = ActivityResult.values(
            [
                ActivityOutput(name="count", output_type=OutputType.VALUE, value=1),
                ActivityOutput(name="file", output_type=OutputType.FILE, value="{}"),
            ]
        )
        assert result.to_output_dict() == {"count": 1, "file": "{}"}

    def test_error(self):
        result = ActivityResult.error("Folder missing", code="FOLDER_NOT_EXIST", retryable=False)

        assert result.is_error is True
        assert result.error_message == "Folder missing"
        assert result.error_code == "FOLDER_NOT_EXIST"
        assert result.retryable is False
        assert result.outputs == []

    def test_error_defaults(self):
        result = ActivityResult.error("boom")
        assert result.error_code == "EXECUTION_ERROR"
        assert result.retryable is True


class TestActivity:
    """Test the Activity interface."""

    def test_abstract(self):
        with pytest.raises(TypeError):
            Activity()

    @pytest.mark.asyncio
    async def test_subclass(self):
        class Checksum(Activity):
            @property
            def name(self) -> str:
                return "checksum"

            async def execute(self, params, ctx):
                return ActivityResult.values(
                    [
                        ActivityOutput(
                            name="size", output_type=OutputType.VALUE, value=len(params["data"])
                        )
                    ]
                )

        result = await Checksum().execute({"data": "abc"}, make_context())

        assert result.to_output_dict() == {"size": 3}


class TestActivityContext:
    """Test ActivityContext."""

    def test_scope(self):
        ctx = make_context()
        assert ctx.scope == f"{ctx.workflow_id}/step1"

    def test_logger_name(self):
        ctx = make_context()
        assert ctx.logger.name == "flowstore.activity.step1"
        assert ctx.logger is ctx.logger

    def test_invalid_activity_key(self):
        with pytest.raises(ValueError):
            ActivityContext(workflow_id=uuid4(), activity_id=uuid4(), activity_key="bad key")
