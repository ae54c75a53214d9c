from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from data_designer.engine.column_generators.generators.base import ColumnGeneratorFullColumn

from comment_style_guard.config import CommentStyleColumnConfig
from comment_style_guard.core import analyze_text

if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)


def row_document(values) -> str:
    return "\n".join(str(v) for v in values if v is not None)


def summarize(text: str, include_diagnostics: bool) -> dict:
    analysis = analyze_text(text)
    output: dict = {
        "is_valid": analysis["is_valid"],
        "diagnostic_count": analysis["diagnostic_count"],
        "codes": analysis["codes"],
    }
    if include_diagnostics:
        output["diagnostics"] = analysis["diagnostics"]
    return output


class CommentStyleColumnGenerator(ColumnGeneratorFullColumn[CommentStyleColumnConfig]):
    """Column generator that checks text against the comment style rules."""

    def generate(self, data: pd.DataFrame) -> pd.DataFrame:
        logger.info(f"\U0001f3b8 Checking column {self.config.name!r} against comment style rules")
        logger.info(f"   target columns: {self.config.target_columns}")
        logger.info(f"   include_diagnostics: {self.config.include_diagnostics}")

        results = [
            summarize(row_document(row.values), self.config.include_diagnostics)
            for _, row in data[self.config.target_columns].iterrows()
        ]
        logger.debug(f"   {sum(1 for r in results if not r['is_valid'])} of {len(results)} rows flagged")

        data = data.copy()
        data[self.config.name] = results
        return data
