"""Gemini exchange API key + secret pairs."""

from typing import List

from leakguard.core.composite import credential_pairs
from leakguard.detectors.base import CredentialCandidate, SecretDetector


class GeminiDetector(SecretDetector):
    """Every key is tried with every secret, capped per kind."""

    family = "Gemini"
    key_fields = ("api_key", "api_secret")
    validation_fields = ("api_key", "api_secret")

    def candidates(self, content: str) -> List[CredentialCandidate]:
        api_keys = self.extract_filtered(content, ["Gemini API Key"])
        if not api_keys:
            return []
        api_secrets = self.extract_filtered(content, ["Gemini API Secret"])

        credentials = []
        for api_key, api_secret in credential_pairs(api_keys, api_secrets, self.max_candidates_per_kind):
            fields = {"api_key": api_key.value, "api_secret": api_secret.value}
            credentials.append(CredentialCandidate(
                parts=(api_key, api_secret),
                fields=fields,
                secret_value={"match": dict(fields)},
                resource_type=self.resource_type_for(api_key.value),
                validation_args=(api_key.value, api_secret.value),
            ))
        return credentials
