"""
PromptForms backend.

Users describe a form in plain language, an AI model turns it into a form
schema, and the published form collects submissions from anyone with the
link.
"""

__version__ = "1.0.0"
