"""Secret handling: redaction for logs, evidence and error envelopes."""
