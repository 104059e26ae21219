"""Tests for hero image selection, storage and front matter patching."""

import openai
import pytest

from conftest import DummyResponse, DummySession
from megafone.errors import ConfigError
from megafone.images import (
    ImagePipeline,
    extension_for,
    front_matter_fields,
    select_best_image,
    set_front_matter_hero,
)
from megafone.models import ImageCandidate, ImageOrigin


def _candidates(n):
    return [ImageCandidate(url=f"https://x.com/{i}.png", origin=ImageOrigin.MARKDOWN_README) for i in range(1, n + 1)]


class TestSelectBestImage:

    def test_single_candidate_skips_llm(self, make_llm):
        llm, fake = make_llm([])
        assert select_best_image(llm, _candidates(1)).url == "https://x.com/1.png"
        assert fake.chat.completions.calls == []

    def test_llm_choice_used(self, make_llm):
        llm, fake = make_llm(["3"])
        assert select_best_image(llm, _candidates(4)).url == "https://x.com/3.png"
        prompt = fake.chat.completions.calls[0]["messages"][1]["content"]
        assert "1. https://x.com/1.png" in prompt
        assert "4. https://x.com/4.png" in prompt

    def test_only_first_five_offered(self, make_llm):
        llm, fake = make_llm(["6"])
        assert select_best_image(llm, _candidates(8)).url == "https://x.com/1.png"
        prompt = fake.chat.completions.calls[0]["messages"][1]["content"]
        assert "https://x.com/6.png" not in prompt

    @pytest.mark.parametrize("reply", ["the second one", "0", None, openai.OpenAIError("boom")])
    def test_falls_back_to_first(self, make_llm, reply):
        llm, _ = make_llm([reply])
        assert select_best_image(llm, _candidates(3)).url == "https://x.com/1.png"

    def test_number_inside_sentence(self, make_llm):
        llm, _ = make_llm(["Image 2."])
        assert select_best_image(llm, _candidates(3)).url == "https://x.com/2.png"


class TestFrontMatter:

    POST = "---\ntitle: \"Zero Trust\"\ndescription: Networks without perimeters\ndate: 2024-05-01\n---\n\n# Body\n"

    def test_fields_from_yaml(self):
        assert front_matter_fields(self.POST) == {"title": "Zero Trust", "description": "Networks without perimeters"}

    def test_fields_from_toml(self):
        post = '+++\ntitle = "TOML Post"\n+++\nbody'
        assert front_matter_fields(post) == {"title": "TOML Post"}

    def test_fields_fall_back_to_regex_on_bad_yaml(self):
        post = "---\ntitle: Colons: everywhere: here\ndescription: [unclosed\n---\nbody"
        assert front_matter_fields(post)["title"] == "Colons: everywhere: here"

    def test_hero_inserted(self):
        patched = set_front_matter_hero(self.POST, "/images/site/zero-trust.png")
        assert "hero: /images/site/zero-trust.png\n---\n" in patched
        assert patched.endswith("# Body\n")

    def test_hero_overwritten(self):
        post = "---\ntitle: x\nhero: /images/site/old.png\n---\nbody"
        patched = set_front_matter_hero(post, "/images/site/new.png")
        assert "old.png" not in patched
        assert patched.count("hero:") == 1

    def test_toml_hero(self):
        patched = set_front_matter_hero('+++\ntitle = "t"\n+++\nbody', "/images/site/t.png")
        assert 'hero = "/images/site/t.png"' in patched

    def test_front_matter_created_when_missing(self):
        patched = set_front_matter_hero("# Just a body\n", "/images/site/a.png")
        assert patched.startswith("---\nhero: /images/site/a.png\n---\n\n# Just a body")


class TestExtension:

    def test_url_suffix_first(self):
        assert extension_for("https://x.com/a/photo.webp?x=1", "image/png") == ".webp"

    def test_content_type_second(self):
        assert extension_for("https://x.com/image", "image/png; charset=binary") == ".png"

    def test_default_jpg(self):
        assert extension_for("https://x.com/image", None) == ".jpg"


class TestImagePipeline:

    def _pipeline(self, site, make_llm, session=None, dry_run=False, image_result=None):
        llm, fake = make_llm([], image_result=image_result)
        pipeline = ImagePipeline(site, llm, "dall-e-3", "1792x1024", dry_run=dry_run, session=session or DummySession())
        return pipeline, fake

    def test_store_local_copies_bytes(self, site, make_llm, tmp_path):
        src = tmp_path / "Shot.PNG"
        src.write_bytes(b"\x89PNGdata")
        pipeline, _ = self._pipeline(site, make_llm)
        stored = pipeline.store_local(str(src), "hello-world")
        assert stored.filename == "hello-world.png"
        assert (site / "assets" / "images" / "site" / "hello-world.png").read_bytes() == b"\x89PNGdata"
        assert stored.site_path == "/images/site/hello-world.png"

    def test_store_local_missing_file(self, site, make_llm, tmp_path):
        pipeline, _ = self._pipeline(site, make_llm)
        with pytest.raises(ConfigError):
            pipeline.store_local(str(tmp_path / "missing.png"), "x")

    def test_download_uses_content_type(self, site, make_llm):
        url = "https://cdn.example.com/render"
        session = DummySession({url: DummyResponse(200, content=b"GIF89a", headers={"Content-Type": "image/gif"})})
        pipeline, _ = self._pipeline(site, make_llm, session=session)
        stored = pipeline.download(ImageCandidate(url=url, origin=ImageOrigin.OG_META), "story")
        assert stored.filename == "story.gif"
        assert stored.local_path.read_bytes() == b"GIF89a"

    def test_download_failure_is_not_fatal(self, site, make_llm):
        pipeline, _ = self._pipeline(site, make_llm)
        candidate = ImageCandidate(url="https://cdn.example.com/gone.png", origin=ImageOrigin.OG_META)
        assert pipeline.download(candidate, "story") is None
        assert not (site / "assets").exists()

    def test_generate_downloads_url(self, site, make_llm):
        session = DummySession({"https://img.example.com/gen.png": DummyResponse(200, content=b"PNG")})
        pipeline, fake = self._pipeline(site, make_llm, session=session, image_result="https://img.example.com/gen.png")
        stored = pipeline.generate(TestFrontMatter.POST, "zero-trust")
        assert stored.filename == "zero-trust.png"
        assert stored.local_path.read_bytes() == b"PNG"
        prompt = fake.images.calls[0]["prompt"]
        assert "Zero Trust" in prompt
        assert "No text, no words" in prompt
        assert "16:9 landscape" in prompt
        assert "full-bleed abstract design" in prompt

    def test_generate_accepts_base64(self, site, make_llm):
        pipeline, _ = self._pipeline(site, make_llm, image_result=b"RAWPNG")
        stored = pipeline.generate("no front matter", "topic")
        assert stored.local_path.read_bytes() == b"RAWPNG"

    def test_generate_failure_is_not_fatal(self, site, make_llm):
        pipeline, _ = self._pipeline(site, make_llm, image_result=openai.OpenAIError("content policy"))
        assert pipeline.generate(TestFrontMatter.POST, "zero-trust") is None

    def test_dry_run_writes_nothing(self, site, make_llm, tmp_path):
        src = tmp_path / "a.jpg"
        src.write_bytes(b"jpg")
        session = DummySession({"https://x.com/a.png": DummyResponse(200, content=b"png")})
        pipeline, fake = self._pipeline(site, make_llm, session=session, dry_run=True, image_result="https://x.com/a.png")

        assert pipeline.store_local(str(src), "a").filename == "a.jpg"
        assert pipeline.download(ImageCandidate(url="https://x.com/a.png", origin=ImageOrigin.OG_META), "b").filename == "b.png"
        assert pipeline.generate(TestFrontMatter.POST, "c") is None

        assert not (site / "assets").exists()
        assert session.calls == []
        assert fake.images.calls == []
