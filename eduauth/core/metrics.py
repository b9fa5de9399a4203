# eduauth/core/metrics.py
from prometheus_client import Counter

CERTIFICATES_ISSUED = Counter(
    "eduauth_certificates_issued_total",
    "Certificates persisted with a freshly allocated serial.",
    ["certificate_type"],
)
ARTIFACT_FAILURES = Counter(
    "eduauth_artifact_failures_total",
    "Certificate document renders that failed and were left pending.",
)
VERIFICATIONS = Counter(
    "eduauth_verifications_total",
    "Public verification lookups by outcome.",
    ["outcome"],
)
