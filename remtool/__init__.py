"""remtool: PDF accessibility detection, scoring and guided remediation."""

from __future__ import annotations

__version__ = "1.0.0"
