"""Live credential validators, one per family."""

from typing import Dict, Optional, Type

import aiohttp

from leakguard.validators.aws import AwsSessionValidator, AwsValidator
from leakguard.validators.base import (
    CredentialValidator,
    HttpCredentialValidator,
    RetryPolicy,
    ValidationResult,
)
from leakguard.validators.docker import DockerValidator
from leakguard.validators.gcp import GcpValidator
from leakguard.validators.gemini import GeminiValidator
from leakguard.validators.services import (
    AnthropicValidator,
    ApolloValidator,
    ArtifactoryValidator,
    AzureOpenAIValidator,
    DeepAIValidator,
    DeepSeekValidator,
    GroqValidator,
    HuggingFaceValidator,
    JotFormValidator,
    LangSmithValidator,
    MailchimpValidator,
    MailgunValidator,
    MakeMcpValidator,
    MakeValidator,
    OpenAIValidator,
    PayPalValidator,
    RapidApiValidator,
    SlackValidator,
    TelegramBotTokenValidator,
)

VALIDATOR_CLASSES: Dict[str, Type[HttpCredentialValidator]] = {
    cls.family: cls
    for cls in (
        AwsValidator,
        AwsSessionValidator,
        GcpValidator,
        PayPalValidator,
        ApolloValidator,
        AnthropicValidator,
        OpenAIValidator,
        SlackValidator,
        HuggingFaceValidator,
        GroqValidator,
        DeepSeekValidator,
        MailchimpValidator,
        MailgunValidator,
        TelegramBotTokenValidator,
        LangSmithValidator,
        ArtifactoryValidator,
        AzureOpenAIValidator,
        DeepAIValidator,
        DockerValidator,
        GeminiValidator,
        JotFormValidator,
        MakeValidator,
        MakeMcpValidator,
        RapidApiValidator,
    )
}


def create_validator(
    family: str,
    session: Optional[aiohttp.ClientSession] = None,
    timeout: int = 10,
) -> Optional[CredentialValidator]:
    """Return the validator for a family, or None if the family has no checker."""
    cls = VALIDATOR_CLASSES.get(family)
    if cls is None:
        return None
    return cls(session=session, timeout=timeout)


__all__ = [
    "CredentialValidator",
    "HttpCredentialValidator",
    "RetryPolicy",
    "ValidationResult",
    "VALIDATOR_CLASSES",
    "create_validator",
]
