"""Workflow state machine and the high-level tools built on it."""

from .workflow import Workflow, WorkflowState
from .process import (
    PresentationJob,
    images_job,
    markdown_to_print,
    merge_job,
    print_progress_bar,
    reorder_job,
    save_artifacts,
    split_job,
)

__all__ = [
    "Workflow",
    "WorkflowState",
    "PresentationJob",
    "images_job",
    "markdown_to_print",
    "merge_job",
    "print_progress_bar",
    "reorder_job",
    "save_artifacts",
    "split_job",
]
