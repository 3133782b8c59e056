"""AWS access key pairs and temporary session credentials."""

from typing import List

from leakguard.core.composite import aws_key_pairs, aws_session_triples
from leakguard.detectors.base import CredentialCandidate, SecretDetector


class AwsAccessKeysDetector(SecretDetector):
    """Long-lived access key id + secret access key pairs."""

    family = "AWS Access & Secret Keys"
    key_fields = ("access_key_id",)
    validation_fields = ("access_key_id", "secret_key_id")

    def candidates(self, content: str) -> List[CredentialCandidate]:
        access_keys = self.extract_filtered(content, ["AWS Access Key"])
        if not access_keys:
            return []
        secret_keys = self.extract_filtered(content, ["AWS Secret Key"])
        if not secret_keys:
            return []

        credentials = []
        for access_key, secret_key in aws_key_pairs(access_keys, secret_keys, self.max_candidates_per_kind):
            fields = {"access_key_id": access_key.value, "secret_key_id": secret_key.value}
            credentials.append(CredentialCandidate(
                parts=(access_key, secret_key),
                fields=fields,
                secret_value={"match": dict(fields)},
                resource_type=self.resource_type_for(access_key.value),
                validation_args=(access_key.value, secret_key.value),
            ))
        return credentials


class AwsSessionKeysDetector(SecretDetector):
    """
    Temporary credentials: ASIA key id + secret key + session token.

    Triples whose token cannot belong with the secret are pruned before any
    validation request is made.
    """

    family = "AWS Session Keys"
    key_fields = ("access_key_id",)
    validation_fields = ("access_key_id", "secret_key_id", "session_key_id")

    def candidates(self, content: str) -> List[CredentialCandidate]:
        access_keys = self.extract_filtered(content, ["AWS Session Key ID"])
        if not access_keys:
            return []
        secret_keys = self.extract_filtered(content, ["AWS Secret Key"])
        session_tokens = self.extract_filtered(content, ["AWS Session Token"])
        if not secret_keys or not session_tokens:
            return []

        credentials = []
        for access_key, secret_key, token in aws_session_triples(
            access_keys, secret_keys, session_tokens, self.max_candidates_per_kind
        ):
            fields = {
                "access_key_id": access_key.value,
                "secret_key_id": secret_key.value,
                "session_key_id": token.value,
            }
            credentials.append(CredentialCandidate(
                parts=(access_key, secret_key, token),
                fields=fields,
                secret_value={"match": dict(fields)},
                resource_type=self.resource_type_for(access_key.value),
                validation_args=(access_key.value, secret_key.value, token.value),
            ))
        return credentials
