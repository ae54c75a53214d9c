# SPDX-License-Identifier: Apache-2.0
"""Comment style guard: an editor linter for r/ProgrammerHumor posts and comments.

Checks the full text of a post or comment against four fixed rules and reports
point diagnostics. Ships a language server, a ``check`` CLI and a ``comment-style``
column type for NeMo Data Designer.

Usage::

    from comment_style_guard import compute_diagnostics

    for d in compute_diagnostics(text):
        print(d.range.start.line, d.range.start.character, d.code, d.message)
"""

__version__ = "0.1.0"

from comment_style_guard.core import (  # noqa: E402
    RICK_ROLL_URL,
    Diagnostic,
    DiagnosticCode,
    analyze_text,
    compute_diagnostics,
)

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "RICK_ROLL_URL",
    "analyze_text",
    "compute_diagnostics",
    "__version__",
]
