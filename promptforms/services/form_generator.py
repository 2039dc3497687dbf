"""
Natural-language prompt -> form schema, via Google Gemini.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Optional

from fastapi import Request
from google import genai
from google.genai import types
from pydantic import ValidationError

from promptforms.errors import FormGenerationError, ServiceNotConfigured
from promptforms.schemas import FormSchema

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"```(?:json)?\n?|\n?```")

SYSTEM_PROMPT = """You are a form schema generator. Convert the user's natural language description into a structured JSON form schema.

IMPORTANT: Return ONLY valid JSON, no other text.

JSON Structure:
{
  "title": "Form Title",
  "description": "Optional form description",
  "fields": [
    {
      "name": "fieldName",
      "label": "Field Label",
      "type": "text|email|number|textarea|select|checkbox|radio|file|date",
      "required": true/false,
      "options": ["option1", "option2"], // only for select/radio types
      "accept": "image/*,.pdf", // for file fields - accepted file types
      "multiple": true/false // for file fields - allow multiple files
    }
  ]
}

Field Types:
- "text": Short text input
- "email": Email input with validation
- "number": Numeric input
- "textarea": Long text input
- "select": Dropdown selection
- "checkbox": Multiple selection
- "radio": Single selection
- "file": File upload - use when user mentions uploads, documents, images, files
- "date": Date picker

File Upload Guidelines:
- When user mentions "photo", "image", "picture" -> set type: "file", accept: "image/*"
- When user mentions "document", "PDF", "file" -> set type: "file", accept: ".pdf,.doc,.docx"
- When user mentions "multiple files" or "multiple images" -> set multiple: true
- For resume uploads -> set accept: ".pdf,.doc,.docx,.txt"
- For profile pictures -> set accept: "image/*", multiple: false

Examples:

User: "I need a job application form with name, email, resume upload, and cover letter"
Output: {
  "title": "Job Application Form",
  "fields": [
    { "name": "name", "label": "Full Name", "type": "text", "required": true },
    { "name": "email", "label": "Email Address", "type": "email", "required": true },
    { "name": "resume", "label": "Upload Resume", "type": "file", "required": true, "accept": ".pdf,.doc,.docx,.txt", "multiple": false },
    { "name": "coverLetter", "label": "Cover Letter", "type": "textarea", "required": false }
  ]
}

User: "Create a property listing form with address, price, and multiple photos"
Output: {
  "title": "Property Listing Form",
  "fields": [
    { "name": "address", "label": "Property Address", "type": "text", "required": true },
    { "name": "price", "label": "Price", "type": "number", "required": true },
    { "name": "photos", "label": "Property Photos", "type": "file", "required": true, "accept": "image/*", "multiple": true }
  ]
}
"""


def build_prompt(prompt: str) -> str:
    return f'{SYSTEM_PROMPT}\nNow generate schema for: "{prompt}"'


def parse_form_schema(text: str, title: Optional[str] = None) -> FormSchema:
    """
    Strip Markdown fences from a model reply and validate it as a FormSchema.

    A non-empty *title* replaces the model's title before validation.
    """
    clean = _CODE_FENCE_RE.sub("", text or "").strip()
    try:
        data = json.loads(clean)
    except json.JSONDecodeError as exc:
        raise FormGenerationError("Model reply was not valid JSON") from exc
    if title and isinstance(data, dict):
        data["title"] = title
    try:
        return FormSchema.model_validate(data)
    except ValidationError as exc:
        raise FormGenerationError("Model reply did not match the form schema") from exc


class FormGenerator:
    """Wraps a lazily created ``genai.Client``."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        client: Optional[genai.Client] = None,
    ) -> None:
        self._api_key = api_key
        self._client = client
        self.model = model

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise ServiceNotConfigured("GEMINI_API_KEY is not set")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate(self, prompt: str, title: Optional[str] = None) -> FormSchema:
        """
        Ask Gemini for a form schema matching *prompt*.

        If *title* is given it replaces whatever title the model chose.

        Raises:
            ServiceNotConfigured if no API key is available.
            FormGenerationError on API failure or an unusable reply.
        """
        client = self._get_client()
        config = types.GenerateContentConfig(
            temperature=0.7,
            top_k=40,
            top_p=0.95,
            max_output_tokens=2048,
        )

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=build_prompt(prompt),
                config=config,
            )
        except Exception as exc:
            logger.exception("Gemini API error")
            raise FormGenerationError("Failed to generate form schema") from exc

        schema = parse_form_schema(response.text, title)
        logger.info("Generated form schema %r with %d fields", schema.title, len(schema.fields))
        return schema


def get_form_generator(request: Request) -> FormGenerator:
    """FastAPI dependency returning the app-wide generator."""
    return request.app.state.form_generator
