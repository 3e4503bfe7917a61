"""
Pipeline error types.

Every error raised out of run_script_pipeline() is a PipelineError carrying
the stage that failed; the underlying exception is kept as both .cause and
__cause__.
"""

from typing import Optional, Union

from .models.enums import PipelineStage


class PipelineError(Exception):
    """
    Base error for a script pipeline run.

    Attributes:
        stage: PipelineStage value where the failure happened
        cause: Original exception, if any
    """

    def __init__(
        self,
        message: str,
        stage: Union[PipelineStage, str],
        cause: Optional[BaseException] = None,
    ):
        self.stage = PipelineStage(stage).value
        self.cause = cause
        super().__init__(message)


class ModelNotFoundError(PipelineError):
    """Raised when the requested creator model does not exist."""

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(f"Model not found: {model_id}", PipelineStage.INITIALIZATION)


class StageFailedError(PipelineError):
    """Raised when a stage fails (after any configured retries)."""

    def __init__(self, stage: Union[PipelineStage, str], cause: BaseException):
        stage_value = PipelineStage(stage).value
        super().__init__(f"Stage '{stage_value}' failed: {cause}", stage_value, cause)
