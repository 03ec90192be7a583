"""User-facing notices produced by workflow actions."""

from dataclasses import dataclass

from shoot_workflow.domain.errors import WorkflowError


@dataclass(frozen=True)
class Notice:
    """A toast-style message: title, description and variant."""

    title: str
    description: str
    variant: str = "default"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


def error_notice(error: WorkflowError) -> Notice:
    """Build a destructive notice from a workflow error."""
    return Notice(
        title=error.title, description=error.user_message, variant="destructive"
    )
