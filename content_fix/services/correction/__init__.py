# content_fix/services/correction/__init__.py
"""
Correction engine: prompts in, corrected content out.

Turns detected quality issues into targeted correction prompts, sends them to
generation backends with retry and failover, parses the responses back into
content, and only accepts corrections that measurably did what was asked.

Components:
- CorrectionPromptBuilder: Issue -> quantitative, prioritized prompt
- ProviderFailoverChain: Ordered backends with bounded retries
- ResponseParser: Free-form backend output -> Content
- CorrectionValidator: Per-issue-type acceptance tests
- CorrectionOrchestrator: Applies a batch of prompts

Usage:
    from content_fix.services.correction import (
        Content, CorrectionOrchestrator, CorrectionPromptBuilder, Issue,
    )

    prompts = CorrectionPromptBuilder().build_all(issues, "seo tips", content)
    result = CorrectionOrchestrator().apply_corrections(content, prompts, "seo tips")

    if result.success:
        print(result.content.title)
    for failure in result.failed_corrections:
        print(f"{failure.issue_type.value}: {failure.error}")
"""

from .failover import FailoverOutcome, ProviderFailoverChain
from .orchestrator import CorrectionOrchestrator, build_correction_request
from .prompt_builder import CorrectionPromptBuilder, sort_by_priority
from .response_parser import CorrectionPayload, ResponseParser, parse_correction_response
from .templates import PROMPT_TEMPLATES, PromptTemplate, get_template, register_template
from .types import (
    BatchValidation,
    Content,
    CorrectionAction,
    CorrectionBatchResult,
    CorrectionHistoryEntry,
    CorrectionPrompt,
    ExpectedChanges,
    FailedCorrection,
    Issue,
    IssueType,
    LocationRef,
    PromptValidation,
    QuantitativeTarget,
    Severity,
)
from .validator import (
    CorrectionValidator,
    register_acceptance_test,
    validate_correction_success,
    validate_single_correction,
)

__all__ = [
    # Engine
    "CorrectionOrchestrator",
    "CorrectionPromptBuilder",
    "CorrectionValidator",
    "ProviderFailoverChain",
    "FailoverOutcome",
    "ResponseParser",
    "CorrectionPayload",
    "build_correction_request",
    "parse_correction_response",
    "sort_by_priority",
    "validate_single_correction",
    "validate_correction_success",
    "register_acceptance_test",
    # Templates
    "PROMPT_TEMPLATES",
    "PromptTemplate",
    "get_template",
    "register_template",
    # Types
    "BatchValidation",
    "Content",
    "CorrectionAction",
    "CorrectionBatchResult",
    "CorrectionHistoryEntry",
    "CorrectionPrompt",
    "ExpectedChanges",
    "FailedCorrection",
    "Issue",
    "IssueType",
    "LocationRef",
    "PromptValidation",
    "QuantitativeTarget",
    "Severity",
]
