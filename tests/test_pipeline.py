"""
End-to-end tests for the content correction pipeline.

Issues go in; prompts are built, corrections applied through scripted
backends, and the result is checked for structure before it is accepted.
"""

import json

import pytest

from content_fix.config import Settings
from content_fix.services.content_pipeline import ContentCorrectionPipeline, correct_content
from content_fix.services.correction import Issue, IssueType


def title_length_oracle(content, keyword):
    return {"title_length": len(content.title)}


@pytest.fixture
def make_pipeline(corrector_config, preserver_config):
    def make(*providers, metric_oracle=None):
        return ContentCorrectionPipeline(
            providers=list(providers),
            corrector_config=corrector_config,
            preserver_config=preserver_config,
            metric_oracle=metric_oracle,
            sleep=lambda seconds: None,
        )

    return make


class TestContentCorrectionPipeline:
    """Tests for ContentCorrectionPipeline.run."""

    def test_title_corrected(self, make_pipeline, mock_provider, as_response, sample_content, title_issue):
        provider = mock_provider(as_response(sample_content, title="SEO Tips for Beginners"))

        result = make_pipeline(provider).run(sample_content, [title_issue], "seo tips")

        assert result.success is True
        assert result.rolled_back is False
        assert result.content.title == "SEO Tips for Beginners"
        assert result.content.body == sample_content.body
        assert result.correction.corrections_applied == 1
        assert result.preservation.validation.is_valid
        assert [p.issue_type for p in result.prompts] == [IssueType.TITLE_TOO_LONG]

    def test_structural_damage_rolled_back(
        self, make_pipeline, mock_provider, as_response, sample_content, title_issue
    ):
        """A correction that sneaks in a new <h1> is undone."""
        damaged = as_response(
            sample_content,
            title="SEO Tips for Beginners",
            content="<h1>SEO tips</h1>" + sample_content.body,
        )

        result = make_pipeline(mock_provider(damaged)).run(sample_content, [title_issue], "seo tips")

        assert result.correction.corrections_applied == 1
        assert result.rolled_back is True
        assert result.success is False
        assert result.content.canonical_json() == sample_content.canonical_json()

    def test_no_issues(self, make_pipeline, mock_provider, sample_content):
        provider = mock_provider()
        result = make_pipeline(provider).run(sample_content, [], "seo tips")

        assert result.success is True
        assert result.content is sample_content
        assert result.preservation is None
        assert result.correction.message == "No corrections needed"
        assert provider.call_count == 0

    def test_unknown_issues_skipped(self, make_pipeline, mock_provider, sample_content):
        result = make_pipeline(mock_provider()).run(sample_content, [Issue(type="reading_level_high")])
        assert result.prompts == []
        assert result.success is True

    def test_every_correction_fails(self, make_pipeline, mock_provider, sample_content, title_issue):
        result = make_pipeline(mock_provider()).run(sample_content, [title_issue], "seo tips")

        assert result.success is False
        assert result.content is sample_content
        assert result.preservation is None
        assert len(result.correction.failed_corrections) == 1

    def test_effectiveness_measured(self, make_pipeline, mock_provider, as_response, sample_content, title_issue):
        provider = mock_provider(as_response(sample_content, title="SEO Tips for Beginners"))
        pipeline = make_pipeline(provider, metric_oracle=title_length_oracle)

        result = pipeline.run(sample_content, [title_issue], "seo tips")

        [measurement] = result.effectiveness
        assert measurement["issue_type"] == "title_too_long"
        assert measurement["success"] is True
        assert measurement["improvement"] == len(sample_content.title) - len("SEO Tips for Beginners")
        assert pipeline.builder.get_effectiveness_stats()["title_too_long"]["successes"] == 1

    def test_failed_prompts_not_measured(self, make_pipeline, mock_provider, as_response, sample_content, title_issue):
        density = Issue(type=IssueType.KEYWORD_DENSITY_HIGH, current_value=4, target_value=2)
        provider = mock_provider("x", "y", "z", as_response(sample_content, title="Short"))

        result = make_pipeline(provider, metric_oracle=title_length_oracle).run(
            sample_content, [title_issue, density], "seo tips"
        )

        assert [m["issue_type"] for m in result.effectiveness] == ["title_too_long"]

    def test_failed_prompt_does_not_hide_same_type_success(
        self, make_pipeline, mock_provider, as_response, sample_content, title_issue
    ):
        provider = mock_provider("x", "y", "z", as_response(sample_content, title="SEO Tips for Beginners"))

        result = make_pipeline(provider, metric_oracle=title_length_oracle).run(
            sample_content, [title_issue, title_issue], "seo tips"
        )

        assert result.correction.corrections_applied == 1
        assert len(result.correction.failed_corrections) == 1
        assert result.correction.failed_corrections[0].prompt is result.prompts[0]
        assert [m["issue_type"] for m in result.effectiveness] == ["title_too_long"]

    def test_no_effectiveness_after_rollback(
        self, make_pipeline, mock_provider, as_response, sample_content, title_issue
    ):
        damaged = as_response(sample_content, title="Short", content="<h1>x</h1>" + sample_content.body)
        result = make_pipeline(mock_provider(damaged), metric_oracle=title_length_oracle).run(
            sample_content, [title_issue]
        )
        assert result.rolled_back
        assert result.effectiveness == []

    def test_to_dict_is_json_serializable(
        self, make_pipeline, mock_provider, as_response, sample_content, title_issue, passive_issue
    ):
        provider = mock_provider(as_response(sample_content, title="Short"))
        result = make_pipeline(provider).run(sample_content, [title_issue, passive_issue], "seo tips")

        data = json.loads(json.dumps(result.to_dict()))

        assert data["content"]["title"] == "Short"
        assert data["corrections_applied"] == 1
        assert data["failed_corrections"] == [
            {
                "issue_type": "passive_voice_high",
                "error": "Correction validation failed - changes not applied correctly",
            }
        ]
        assert data["integrity"]["is_valid"] is True
        assert data["prompts"][0]["issue_type"] == "title_too_long"
        assert data["rolled_back"] is False


class TestCorrectContent:
    """Tests for the correct_content convenience wrapper."""

    def test_with_explicit_providers(self, mock_provider, as_response, sample_content, title_issue):
        settings = Settings(DEFAULT_PROVIDER="mock", CORRECTION_RETRY_DELAY_SECONDS=0)
        provider = mock_provider(as_response(sample_content, title="Short"))

        result = correct_content(sample_content, [title_issue], "seo tips", providers=[provider], settings=settings)

        assert result.success is True
        assert result.content.title == "Short"

    def test_providers_from_settings(self, sample_content):
        settings = Settings(DEFAULT_PROVIDER="mock", BACKUP_PROVIDERS="", CORRECTION_RETRY_DELAY_SECONDS=0)
        pipeline = ContentCorrectionPipeline.from_settings(settings)

        assert pipeline.orchestrator.chain.provider_names == ["mock"]
        assert pipeline.corrector_config.retry_delay_seconds == 0
