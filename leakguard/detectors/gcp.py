"""Google Cloud Platform service account keys."""

import json
import logging
from typing import Dict, List, Tuple

from leakguard.core.composite import GCP_FIXED_FIELDS, GcpComponents, extract_gcp_components
from leakguard.core.false_positives import is_known_false_positive
from leakguard.detectors.base import CredentialCandidate, SecretDetector

logger = logging.getLogger(__name__)

# Field order of a service account key file as downloaded from the console
CREDENTIAL_FIELDS = (
    "type", "project_id", "private_key_id", "private_key", "client_email", "client_id",
    "auth_uri", "token_uri", "auth_provider_x509_cert_url", "client_x509_cert_url",
)


def build_gcp_credentials(components: GcpComponents) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Assemble the service account key from recovered components.

    Returns:
        The usable credentials (private key newlines unescaped) and the raw
        credentials exactly as they appeared in the content
    """
    raw = {}
    for name in CREDENTIAL_FIELDS:
        value = components.get(name)
        if value is None and name in GCP_FIXED_FIELDS:
            value = GCP_FIXED_FIELDS[name][1]
        raw[name] = value or ""

    raw_key = raw["private_key"]
    if "\\n" in raw_key and not raw_key.endswith("\\n"):
        raw["private_key"] = raw_key + "\\n"

    credentials = dict(raw)
    credentials["private_key"] = raw["private_key"].replace("\\n", "\n")
    return credentials, raw


class GcpDetector(SecretDetector):
    """Service account keys reconstructed from scattered JSON fields."""

    family = "Google Cloud Platform"
    key_fields = ("service_account_key",)
    validation_fields = ("service_account_key",)

    def candidates(self, content: str) -> List[CredentialCandidate]:
        if not self.extractor.contains(content, "GCP Service Account Key"):
            return []

        components = extract_gcp_components(self.extractor, content)
        if not components.is_complete():
            logger.debug("Incomplete GCP service account: found %s", sorted(components.values))
            return []

        credentials, raw = build_gcp_credentials(components)
        credentials_json = json.dumps(credentials, separators=(",", ":"))
        raw_json = json.dumps(raw, separators=(",", ":"))

        is_false_positive, reason = is_known_false_positive(credentials_json)
        if is_false_positive:
            logger.debug("GCP service account rejected (%s)", reason)
            return []

        match = {"service_account_key": credentials_json}
        match.update({name: credentials[name] for name in CREDENTIAL_FIELDS if name != "private_key"})
        return [CredentialCandidate(
            parts=tuple(components.located()),
            fields=credentials,
            secret_value={"match": match},
            resource_type=self.resource_type_for(credentials["client_email"]),
            validation_args=(credentials_json,),
            dedup_alternatives=[{"service_account_key": raw_json}],
        )]

    def is_duplicate(self, credential: CredentialCandidate, dedup) -> bool:
        credentials_json = credential.validation_args[0]
        for fields in [{"service_account_key": credentials_json}, *credential.dedup_alternatives]:
            if dedup.is_already_found(fields, self.family, self.key_fields):
                return True
        return False
