"""Family detectors and the factory that assembles them."""

from typing import Dict, List, Optional, Type

from leakguard.core.exceptions import ScanError
from leakguard.core.repository import FindingsRepository
from leakguard.detectors.aws import AwsAccessKeysDetector, AwsSessionKeysDetector
from leakguard.detectors.base import CredentialCandidate, SecretDetector, SingleKeyDetector
from leakguard.detectors.docker import DockerDetector
from leakguard.detectors.gcp import GcpDetector
from leakguard.detectors.gemini import GeminiDetector
from leakguard.detectors.hosted import ArtifactoryDetector, AzureOpenAIDetector, HostedKeyDetector
from leakguard.detectors.paypal import PayPalOAuthDetector
from leakguard.detectors.services import (
    AnthropicDetector,
    ApolloDetector,
    DeepAIDetector,
    DeepSeekDetector,
    GroqDetector,
    HuggingFaceDetector,
    JotFormDetector,
    LangSmithDetector,
    MailchimpDetector,
    MailgunDetector,
    MakeDetector,
    MakeMcpDetector,
    OpenAIDetector,
    RapidApiDetector,
    SlackDetector,
    TelegramBotTokenDetector,
)

DETECTOR_CLASSES: Dict[str, Type[SecretDetector]] = {
    cls.family: cls
    for cls in (
        AwsAccessKeysDetector,
        AwsSessionKeysDetector,
        GcpDetector,
        PayPalOAuthDetector,
        ApolloDetector,
        AnthropicDetector,
        OpenAIDetector,
        SlackDetector,
        HuggingFaceDetector,
        GroqDetector,
        DeepSeekDetector,
        MailchimpDetector,
        MailgunDetector,
        TelegramBotTokenDetector,
        LangSmithDetector,
        ArtifactoryDetector,
        AzureOpenAIDetector,
        DeepAIDetector,
        DockerDetector,
        GeminiDetector,
        JotFormDetector,
        MakeDetector,
        MakeMcpDetector,
        RapidApiDetector,
    )
}


class DetectorFactory:
    """Builds detectors that share one repository and one set of options."""

    @staticmethod
    def families() -> List[str]:
        return list(DETECTOR_CLASSES)

    @staticmethod
    def create_detector(family: str, repository: FindingsRepository, **kwargs) -> SecretDetector:
        cls = DETECTOR_CLASSES.get(family)
        if cls is None:
            raise ScanError(f"Unknown secret family: {family}", {"available": list(DETECTOR_CLASSES)})
        return cls(repository, **kwargs)

    @classmethod
    def create_detectors(
        cls,
        repository: FindingsRepository,
        families: Optional[List[str]] = None,
        **kwargs,
    ) -> List[SecretDetector]:
        return [cls.create_detector(family, repository, **kwargs) for family in families or DETECTOR_CLASSES]


__all__ = [
    "CredentialCandidate",
    "SecretDetector",
    "SingleKeyDetector",
    "HostedKeyDetector",
    "DETECTOR_CLASSES",
    "DetectorFactory",
]
