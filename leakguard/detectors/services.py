"""Detectors for single-token SaaS credentials."""

import re
from typing import List

from leakguard.detectors.base import CredentialCandidate, SecretDetector, SingleKeyDetector

_MCP_TOKEN = re.compile(r"/u/([a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})/")


class ApolloDetector(SingleKeyDetector):
    family = "Apollo"
    # Keys assigned to an apollo-ish name are preferred over bare quoted strings
    pattern_names = ("Apollo API Key Context", "Apollo API Key")


class AnthropicDetector(SingleKeyDetector):
    family = "Anthropic AI"
    pattern_names = ("Anthropic API Key",)


class OpenAIDetector(SingleKeyDetector):
    family = "OpenAI"
    pattern_names = ("OpenAI API Key",)


class SlackDetector(SingleKeyDetector):
    family = "Slack"
    pattern_names = (
        "Slack Bot Token",
        "Slack User Token",
        "Slack Workspace Access Token",
        "Slack Workspace Refresh Token",
    )
    field_name = "token"


class HuggingFaceDetector(SingleKeyDetector):
    family = "Hugging Face"
    pattern_names = ("Hugging Face Token",)


class GroqDetector(SingleKeyDetector):
    family = "Groq"
    pattern_names = ("Groq API Key",)


class DeepSeekDetector(SingleKeyDetector):
    family = "DeepSeek"
    pattern_names = ("DeepSeek API Key Context", "DeepSeek API Key")


class MailchimpDetector(SingleKeyDetector):
    family = "Mailchimp"
    pattern_names = ("Mailchimp API Key",)


class MailgunDetector(SingleKeyDetector):
    family = "Mailgun"
    pattern_names = ("Mailgun Original Token", "Mailgun Key Token", "Mailgun Hex Token")


class TelegramBotTokenDetector(SingleKeyDetector):
    family = "Telegram Bot Token"
    pattern_names = ("Telegram Bot Token",)
    field_name = "bot_token"


class LangSmithDetector(SingleKeyDetector):
    family = "LangSmith"
    pattern_names = ("LangSmith API Key",)


class DeepAIDetector(SingleKeyDetector):
    family = "DeepAI"
    pattern_names = ("DeepAI API Key",)


class JotFormDetector(SingleKeyDetector):
    family = "JotForm"
    pattern_names = ("JotForm API Key",)


class RapidApiDetector(SingleKeyDetector):
    family = "RapidAPI"
    pattern_names = ("RapidAPI Key",)


class MakeDetector(SingleKeyDetector):
    family = "Make"
    pattern_names = ("Make API Token",)
    field_name = "api_token"


class MakeMcpDetector(SecretDetector):
    """MCP server URLs; the token is the UUID path segment."""

    family = "Make MCP"
    key_fields = ("full_url",)
    validation_fields = ("full_url",)

    def candidates(self, content: str) -> List[CredentialCandidate]:
        credentials = []
        for candidate in self.extract_filtered(content, ["Make MCP Token"]):
            token = _MCP_TOKEN.search(candidate.value)
            fields = {"mcp_token": token.group(1) if token else "", "full_url": candidate.value}
            credentials.append(CredentialCandidate(
                parts=(candidate,),
                fields=fields,
                secret_value={"match": dict(fields)},
                resource_type=self.resource_type_for(candidate.value),
                validation_args=(candidate.value,),
            ))
        return credentials
