# content_fix/constants.py
"""
Centralized magic constants organized by domain.

All hardcoded numbers/strings used throughout the correction engine should be
defined here with documentation explaining their purpose.
"""


class CorrectionDefaults:
    """Default values for the correction orchestrator."""

    MAX_ATTEMPTS_PER_PROMPT = 3         # Attempts per provider for one prompt
    RETRY_DELAY_SECONDS = 0.5           # Fixed pause between attempts
    TIMEOUT_SECONDS = 30                # Per-call backend timeout
    TEMPERATURE = 0.3                   # Low temperature for focused edits
    MAX_TOKENS = 4096                   # Generation cap per correction
    MIN_IMPROVEMENT_PERCENT = 5.0       # Relative improvement counted as effective
    HISTORY_CAPACITY = 500              # Max history / audit log entries kept
    BATCH_SUCCESS_RATE_MIN_PCT = 50     # Batch validation pass mark


class PromptLimits:
    """Prompt rendering and quantitative estimation constants."""

    MAX_PRIORITY = 10
    MAX_RENDERED_LOCATIONS = 3          # Location excerpts shown in a prompt

    # Preview lengths for location excerpts
    CONTEXT_PREVIEW_CHARS = 50
    SENTENCE_PREVIEW_CHARS = 60
    HEADING_PREVIEW_CHARS = 60
    ALT_TEXT_PREVIEW_CHARS = 30

    # Assumed document size for change-count estimates
    ASSUMED_WORD_COUNT = 500
    ASSUMED_SENTENCE_COUNT = 30

    # Difference-per-edit divisors when no locations are known
    PASSIVE_VOICE_DIVISOR = 10
    SENTENCE_LENGTH_DIVISOR = 5
    SUBHEADING_DIVISOR = 25

    SEVERITY_BOOST = {"critical": 2, "major": 1, "minor": 0}


class ValidationDefaults:
    """Acceptance test constants for single corrections."""

    META_DESCRIPTION_TARGET_CHARS = 140  # Used when a prompt carries no target


class IntegrityThresholds:
    """Structure preservation thresholds."""

    TAG_COUNT_TOLERANCE = 1             # Allowed +/- per tag before a major violation
    PARAGRAPH_DRIFT_MAX = 0.2           # 20% paragraph count drift
    BODY_LENGTH_DRIFT_MAX = 0.3         # 30% body length drift (warning)
    TITLE_SIMILARITY_MIN_PCT = 70.0     # Below this a changed title is flagged

    MAX_SNAPSHOTS = 10
    STRUCTURE_CACHE_SIZE = 256
