"""Model-backed issue augmentation."""

from __future__ import annotations

from .augmentor import Augmentor, augment, finding_to_issue, merge_issues, select_pages

__all__ = ["Augmentor", "augment", "finding_to_issue", "merge_issues", "select_pages"]
