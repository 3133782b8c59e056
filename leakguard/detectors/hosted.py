"""Keys for self-hosted service instances, paired with the instance URL."""

import logging
from typing import List

from leakguard.core.composite import credential_pairs
from leakguard.detectors.base import CredentialCandidate, SecretDetector

logger = logging.getLogger(__name__)


class HostedKeyDetector(SecretDetector):
    """
    Key + instance URL credentials.

    A key can only be checked against the instance that issued it, so every
    key is paired with every instance URL found in the same content. Keys
    with no URL next to them are dropped.
    """

    key_pattern: str = ""
    url_pattern: str = ""
    key_fields = ("api_key",)
    validation_fields = ("api_key", "url")

    def candidates(self, content: str) -> List[CredentialCandidate]:
        keys = self.extract_filtered(content, [self.key_pattern])
        if not keys:
            return []
        urls = self.extract_filtered(content, [self.url_pattern])
        if not urls:
            logger.debug("%s key found without an instance URL", self.family)
            return []

        credentials = []
        for key, url in credential_pairs(keys, urls, self.max_candidates_per_kind, kinds=("key", "instance URL")):
            fields = {"api_key": key.value, "url": url.value}
            credentials.append(CredentialCandidate(
                parts=(key, url),
                fields=fields,
                secret_value={"match": dict(fields)},
                resource_type=self.resource_type_for(key.value),
                validation_args=(key.value, url.value),
            ))
        return credentials


class ArtifactoryDetector(HostedKeyDetector):
    family = "Artifactory"
    key_pattern = "Artifactory Access Token"
    url_pattern = "Artifactory URL"


class AzureOpenAIDetector(HostedKeyDetector):
    family = "Azure OpenAI"
    key_pattern = "Azure OpenAI API Key"
    url_pattern = "Azure OpenAI URL"
