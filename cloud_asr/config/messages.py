"""User-facing explanations, one per error classification."""

from __future__ import annotations

# Keys are ErrorKind values.
ERROR_MESSAGES: dict[str, str] = {
    "configuration": (
        "Speech recognition is not configured correctly. "
        "Check the SecretId, SecretKey and AppId, and that real-time ASR is enabled for the account."
    ),
    "permission": (
        "The microphone could not be opened. "
        "Check microphone permission for this application and that no other program is using the device."
    ),
    "transport": "Lost the connection to the speech service. Check the network connection and try again.",
    "protocol": "The speech service sent an unexpected reply. Try again; if it persists, check the service endpoint.",
    "service_fatal": (
        "The speech service rejected the request. "
        "Check credentials and signature, that the service is enabled, and that the resource package is not exhausted."
    ),
    "service_recoverable": "The speech service reported a temporary problem. Try again shortly.",
    "no_speech": (
        "No speech was detected. Speak clearly 10-20cm from the microphone, "
        "check the input volume, and try again in a quiet place."
    ),
    "connection_exhausted": (
        "Could not reach the speech service after several attempts. Check the network connection and configuration."
    ),
}

SERVICE_CODE_HINTS: dict[int, str] = {
    4001: "Request parameters were rejected; check the recognition parameters.",
    4002: "Authentication failed; check the SecretId/SecretKey pair and the request signature.",
    4003: "Real-time ASR is not enabled for this AppId; enable it in the cloud console.",
    4004: "The resource package is exhausted; purchase a package or enable pay-as-you-go.",
    4005: "The account is in arrears; top up the account to resume service.",
}

__all__ = ["ERROR_MESSAGES", "SERVICE_CODE_HINTS"]
