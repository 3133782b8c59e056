"""PayPal REST application credentials."""

from typing import List

from leakguard.core.composite import paypal_pairs
from leakguard.detectors.base import CredentialCandidate, SecretDetector


class PayPalOAuthDetector(SecretDetector):
    """Client id + client secret pairs, matched in order of appearance."""

    family = "PayPal OAuth"
    key_fields = ("client_id", "client_secret")
    validation_fields = ("client_id", "client_secret")

    def candidates(self, content: str) -> List[CredentialCandidate]:
        client_ids = self.extract_filtered(content, ["PayPal Client ID"])
        if not client_ids:
            return []
        client_secrets = self.extract_filtered(content, ["PayPal Client Secret"])

        credentials = []
        for client_id, client_secret in paypal_pairs(client_ids, client_secrets, self.max_candidates_per_kind):
            fields = {"client_id": client_id.value, "client_secret": client_secret.value}
            credentials.append(CredentialCandidate(
                parts=(client_id, client_secret),
                fields=fields,
                secret_value={"match": dict(fields)},
                resource_type=self.resource_type_for(client_id.value),
                validation_args=(client_id.value, client_secret.value),
            ))
        return credentials
