from __future__ import annotations

from typing import Literal

from pydantic import Field

from data_designer.config.column_configs import SingleColumnConfig


class CommentStyleColumnConfig(SingleColumnConfig):
    """Check text columns against the fixed comment style rules.

    Each row's target columns are joined with newlines into one document, so the
    first target column supplies the "import" line and the last one the
    "return" line.

    Attributes:
        target_columns: Columns whose text content will be joined and checked.
        include_diagnostics: Include the positioned diagnostics (code, message,
            range) in output, not just the summary.
    """

    target_columns: list[str] = Field(min_length=1)
    include_diagnostics: bool = Field(default=True, description="Include positioned diagnostics in output")
    column_type: Literal["comment-style"] = "comment-style"

    @staticmethod
    def get_column_emoji() -> str:
        return "\U0001f3b8"

    @property
    def required_columns(self) -> list[str]:
        return self.target_columns

    @property
    def side_effect_columns(self) -> list[str]:
        return []
