"""
Tests for correction acceptance tests.
"""

import pytest

from content_fix.services.correction import (
    Content,
    CorrectionPrompt,
    CorrectionPromptBuilder,
    CorrectionValidator,
    Issue,
    IssueType,
    validate_correction_success,
    validate_single_correction,
)
from content_fix.services.correction.validator import ACCEPTANCE_TESTS, register_acceptance_test


def prompt_for(issue_type, **kwargs):
    return CorrectionPrompt(issue_type=issue_type, prompt_text="fix", **kwargs)


@pytest.fixture
def original():
    return Content(
        title="A title that is far too long for search results pages",
        meta_description="Short meta.",
        body="<p>Body with seo tips and more seo tips.</p>",
    )


class TestValidateSingleCorrection:
    """Tests for validate_single_correction."""

    def test_noop_rejected(self, original):
        for issue_type in IssueType:
            assert validate_single_correction(original, original, prompt_for(issue_type)) is False

    def test_equal_copy_rejected(self, original):
        copy = Content(original.title, original.meta_description, original.body)
        assert validate_single_correction(original, copy, prompt_for(IssueType.NO_IMAGES)) is False

    def test_title_shorter_accepted(self, original):
        corrected = Content("Shorter title", original.meta_description, original.body)
        assert validate_single_correction(original, corrected, prompt_for(IssueType.TITLE_TOO_LONG))

    def test_title_longer_rejected(self, original):
        corrected = Content(original.title + " and more", original.meta_description, original.body)
        assert not validate_single_correction(original, corrected, prompt_for(IssueType.TITLE_TOO_LONG))

    def test_meta_closer_to_default_target(self, original):
        """Without a quantitative target the meta target is 140 characters."""
        corrected = Content(original.title, "A" * 120, original.body)
        assert validate_single_correction(original, corrected, prompt_for(IssueType.META_DESCRIPTION_SHORT))

    def test_meta_overshoot_rejected(self, original):
        corrected = Content(original.title, "A" * 300, original.body)
        assert not validate_single_correction(original, corrected, prompt_for(IssueType.META_DESCRIPTION_SHORT))

    def test_meta_uses_quantitative_target(self, original, sample_content):
        issue = Issue(type=IssueType.META_DESCRIPTION_LONG, current_value=11, target_value=5)
        prompt = CorrectionPromptBuilder().build(issue, "k", sample_content)

        closer = Content(original.title, "Short", original.body)
        farther = Content(original.title, "A" * 30, original.body)
        assert validate_single_correction(original, closer, prompt)
        assert not validate_single_correction(original, farther, prompt)

    def test_density_requires_body_change(self, original):
        title_only = Content("Other", original.meta_description, original.body)
        body_changed = Content(original.title, original.meta_description, "<p>Body with tips.</p>")

        prompt = prompt_for(IssueType.KEYWORD_DENSITY_HIGH)
        assert not validate_single_correction(original, title_only, prompt)
        assert validate_single_correction(original, body_changed, prompt)

    def test_untested_types_accept_any_change(self, original):
        corrected = Content(original.title, original.meta_description, original.body + "<p>x</p>")
        assert validate_single_correction(original, corrected, prompt_for(IssueType.TRANSITION_WORDS_LOW))

    def test_register_acceptance_test(self, original, monkeypatch):
        monkeypatch.setitem(ACCEPTANCE_TESTS, IssueType.NO_IMAGES, ACCEPTANCE_TESTS.get(IssueType.NO_IMAGES))
        register_acceptance_test(IssueType.NO_IMAGES, lambda o, c, p: "<img" in c.body)

        without_image = Content(original.title, original.meta_description, "<p>x</p>")
        with_image = Content(original.title, original.meta_description, '<p>x</p><img src="a">')
        prompt = prompt_for(IssueType.NO_IMAGES)

        assert not validate_single_correction(original, without_image, prompt)
        assert validate_single_correction(original, with_image, prompt)


class TestValidateCorrectionSuccess:
    """Tests for batch validation."""

    def test_half_is_enough(self, original):
        corrected = Content("Short", original.meta_description, original.body)
        prompts = [prompt_for(IssueType.TITLE_TOO_LONG), prompt_for(IssueType.KEYWORD_DENSITY_HIGH)]

        result = validate_correction_success(original, corrected, prompts)

        assert result.success is True
        assert result.success_rate == 50.0
        assert [v.valid for v in result.validations] == [True, False]
        assert result.message == "1 of 2 corrections validated"

    def test_below_half_fails(self, original):
        corrected = Content("Short", original.meta_description, original.body)
        prompts = [
            prompt_for(IssueType.TITLE_TOO_LONG),
            prompt_for(IssueType.KEYWORD_DENSITY_HIGH),
            prompt_for(IssueType.KEYWORD_DENSITY_LOW),
        ]
        result = validate_correction_success(original, corrected, prompts)
        assert result.success is False

    def test_empty_prompt_list(self, original):
        result = validate_correction_success(original, original, [])
        assert result.success is False
        assert result.success_rate == 0.0
        assert result.message == "0 of 0 corrections validated"

    def test_validator_wrapper(self, original):
        validator = CorrectionValidator()
        corrected = Content("Short", original.meta_description, original.body)
        prompt = prompt_for(IssueType.TITLE_TOO_LONG)

        assert validator.validate_single(original, corrected, prompt)
        assert validator.validate_batch(original, corrected, [prompt]).success
