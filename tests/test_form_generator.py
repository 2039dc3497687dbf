"""Tests for the Gemini-backed form generator."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from promptforms.errors import FormGenerationError, ServiceNotConfigured
from promptforms.services.form_generator import (
    FormGenerator,
    build_prompt,
    parse_form_schema,
)

REPLY = {
    "title": "Job Application Form",
    "fields": [
        {"name": "name", "label": "Full Name", "type": "text", "required": True},
        {"name": "resume", "label": "Upload Resume", "type": "file", "required": True,
         "accept": ".pdf,.doc,.docx,.txt", "multiple": False},
    ],
}


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


def make_generator(text=None, error=None):
    models = FakeModels(text=text, error=error)
    client = SimpleNamespace(aio=SimpleNamespace(models=models))
    return FormGenerator(api_key="", model="gemini-test", client=client), models


class TestParseFormSchema:
    def test_plain_json(self):
        schema = parse_form_schema(json.dumps(REPLY))
        assert schema.title == "Job Application Form"
        assert schema.fields[1].type == "file"
        assert schema.fields[1].multiple is False

    def test_strips_markdown_fences(self):
        schema = parse_form_schema("```json\n" + json.dumps(REPLY) + "\n```")
        assert [f.name for f in schema.fields] == ["name", "resume"]

    def test_invalid_json(self):
        with pytest.raises(FormGenerationError):
            parse_form_schema("Sure! Here is your form:")

    def test_unknown_field_type(self):
        bad = {"title": "T", "fields": [{"name": "a", "label": "A", "type": "slider"}]}
        with pytest.raises(FormGenerationError):
            parse_form_schema(json.dumps(bad))

    def test_missing_title(self):
        with pytest.raises(FormGenerationError):
            parse_form_schema(json.dumps({"fields": []}))

    def test_supplied_title_fills_blank_model_title(self):
        schema = parse_form_schema(json.dumps({**REPLY, "title": ""}), title="Careers")
        assert schema.title == "Careers"


class TestFormGenerator:
    def test_generate_sends_prompt_and_parses_reply(self):
        generator, models = make_generator(text=json.dumps(REPLY))

        schema = asyncio.run(generator.generate("job application with resume"))

        assert schema.title == "Job Application Form"
        call = models.calls[0]
        assert call["model"] == "gemini-test"
        assert call["contents"] == build_prompt("job application with resume")
        assert call["config"].temperature == 0.7
        assert call["config"].max_output_tokens == 2048

    def test_title_override(self):
        generator, _ = make_generator(text=json.dumps(REPLY))
        schema = asyncio.run(generator.generate("job application", title="Hiring 2026"))
        assert schema.title == "Hiring 2026"

    def test_title_override_rescues_blank_model_title(self):
        generator, _ = make_generator(text=json.dumps({**REPLY, "title": ""}))
        schema = asyncio.run(generator.generate("job application", title="Hiring 2026"))
        assert schema.title == "Hiring 2026"

    def test_api_error_becomes_generation_error(self):
        generator, _ = make_generator(error=RuntimeError("quota exceeded"))
        with pytest.raises(FormGenerationError):
            asyncio.run(generator.generate("anything"))

    def test_unusable_reply_becomes_generation_error(self):
        generator, _ = make_generator(text="not json at all")
        with pytest.raises(FormGenerationError):
            asyncio.run(generator.generate("anything"))

    def test_missing_api_key(self):
        generator = FormGenerator(api_key="")
        assert generator.configured is False
        with pytest.raises(ServiceNotConfigured):
            asyncio.run(generator.generate("anything"))

    def test_configured_with_key(self):
        assert FormGenerator(api_key="abc").configured is True

    def test_prompt_embeds_user_request(self):
        prompt = build_prompt("a pizza order form")
        assert prompt.endswith('Now generate schema for: "a pizza order form"')
        assert "Return ONLY valid JSON" in prompt
