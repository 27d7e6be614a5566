"""
GitHub Calendar - Integrations

This module provides the GitHub integration:
- Projects v2 items over GraphQL
- Label search over REST as a fallback
- Normalization of both into one Issue shape
"""

from .github import (
    GitHubClient,
    Issue,
    Label,
    Milestone,
    Person,
    FieldKind,
    FieldValue,
    ProjectItem,
    normalize_field_value,
    normalize_graphql_item,
    normalize_rest_issue
)

__all__ = [
    "GitHubClient",
    "Issue",
    "Label",
    "Milestone",
    "Person",
    "FieldKind",
    "FieldValue",
    "ProjectItem",
    "normalize_field_value",
    "normalize_graphql_item",
    "normalize_rest_issue",
]
