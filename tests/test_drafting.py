"""Tests for prompt assembly, drafting and filename generation."""

from types import SimpleNamespace

import openai
import pytest

from megafone.drafting import (
    build_draft_prompt,
    choose_filename,
    clean_slug,
    fallback_filename,
    generate_draft,
    sanitize_filename,
)
from megafone.errors import EmptyGenerationError, LLMError
from megafone.models import GitHubRepo, ResearchTopic, SourceMaterial, TemplateSelection, WebsiteURL
from megafone.prompt_loader import load_template

REPO = GitHubRepo(owner="octo", name="Hello-World")


@pytest.fixture
def template():
    return load_template(TemplateSelection.GITHUB_PROJECT)


class TestDraftPrompt:

    def test_prompt_carries_all_parts(self, template):
        prompt = build_draft_prompt(
            template, REPO, "Repository: octo/Hello-World", hero_image="hello-world.png",
            tags="go,cli", date="2024-05-01",
        )
        assert prompt.startswith(template.text.splitlines()[0])
        assert "Please generate a blog post for this GitHub repository:" in prompt
        assert "Repository: octo/Hello-World" in prompt
        assert "User-provided tags: go,cli" in prompt
        assert "Use date: 2024-05-01 in the front matter" in prompt
        assert "Include 'hero: /images/site/hello-world.png' in the front matter" in prompt
        assert "ONLY valid markdown" in prompt

    def test_no_hero_directive_without_image(self, template):
        prompt = build_draft_prompt(template, REPO, "ctx", tags="", date="2024-05-01")
        assert "hero:" not in prompt
        assert "Hero image available" not in prompt

    def test_research_prompt_has_word_target(self):
        template = load_template(TemplateSelection.RESEARCH_TOPIC)
        prompt = build_draft_prompt(template, ResearchTopic(text="CRDTs"), "Topic: CRDTs", date="2024-05-01")
        assert "800-1200 words" in prompt
        assert "research findings" in prompt


class TestGenerateDraft:

    def test_returns_content(self, make_llm, template):
        llm, fake = make_llm(["---\ntitle: x\n---\nbody"])
        assert generate_draft(llm, template, "prompt") == "---\ntitle: x\n---\nbody"
        call = fake.chat.completions.calls[0]
        assert call["messages"][0] == {"role": "system", "content": template.system}
        assert call["messages"][1]["content"] == "prompt"

    def test_unwraps_markdown_fence(self, make_llm, template):
        llm, _ = make_llm(["```markdown\n---\ntitle: x\n---\nbody\n```"])
        assert generate_draft(llm, template, "p") == "---\ntitle: x\n---\nbody\n"

    def test_empty_choices_fail(self, make_llm, template):
        llm, _ = make_llm([None])
        with pytest.raises(EmptyGenerationError):
            generate_draft(llm, template, "p")

    def test_refusal_logged_before_failing(self, make_llm, template, caplog):
        llm, _ = make_llm([SimpleNamespace(content="", refusal="I can't help with that.")])
        caplog.set_level("ERROR")
        with pytest.raises(EmptyGenerationError) as exc_info:
            generate_draft(llm, template, "p")
        assert exc_info.value.refusal == "I can't help with that."
        assert any("I can't help with that." in r.getMessage() for r in caplog.records)

    def test_api_error_wrapped_with_hints(self, make_llm, template):
        llm, _ = make_llm([openai.OpenAIError("quota exceeded")])
        with pytest.raises(LLMError) as exc_info:
            generate_draft(llm, template, "p")
        assert "quota exceeded" in str(exc_info.value)
        assert "Troubleshooting" in str(exc_info.value)


class TestFilenames:

    def test_sanitize_filename(self):
        assert sanitize_filename("Kubernetes: Security Best Practices!!") == "kubernetes-security-best-practices"

    def test_sanitize_filename_caps_length(self):
        result = sanitize_filename("word " * 30)
        assert len(result) <= 50
        assert not result.endswith("-")

    def test_clean_slug(self):
        assert clean_slug('  "Echo Show Home Assistant"  ') == "echo-show-home-assistant"
        assert clean_slug("`syllabus-tracker.md`") == "syllabus-tracker"

    def test_clean_slug_drops_chatter(self):
        assert clean_slug("Filename: zero-trust") == "filename-zero-trust"
        assert clean_slug("zero-trust\nexplained") == "zero-trust-explained"
        assert clean_slug("!!!") == ""

    def test_unusable_slug_falls_back(self, make_llm):
        llm, _ = make_llm(["???"])
        assert choose_filename(llm, "post", REPO, SourceMaterial()) == "hello-world"

    def test_llm_slug_used(self, make_llm):
        llm, fake = make_llm(["Rust-CLI-Patterns"])
        name = choose_filename(llm, "post", REPO, SourceMaterial())
        assert name == "rust-cli-patterns"
        assert fake.chat.completions.calls[0]["max_tokens"] == 20

    def test_github_fallback_on_api_error(self, make_llm):
        llm, _ = make_llm([openai.OpenAIError("down")])
        assert choose_filename(llm, "post", REPO, SourceMaterial()) == "hello-world"

    def test_website_fallback_on_empty_result(self, make_llm):
        llm, _ = make_llm(["``"])
        material = SourceMaterial(title="Kubernetes: Security Best Practices!!")
        site = WebsiteURL(url="https://example.com/k8s")
        assert choose_filename(llm, "post", site, material) == "kubernetes-security-best-practices"

    def test_research_fallback_uses_topic(self, make_llm):
        llm, _ = make_llm([None])
        topic = ResearchTopic(text="Zero Trust Networking")
        assert choose_filename(llm, "post", topic, SourceMaterial(title="ignored")) == "zero-trust-networking"

    def test_fallback_never_empty(self):
        assert fallback_filename(ResearchTopic(text="???"), SourceMaterial()) == "post"
