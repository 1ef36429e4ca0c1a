"""Command line entry point: `python -m cloud_asr {transcribe,sign,serve}`."""

from __future__ import annotations

import sys
import asyncio
import logging
import argparse

import orjson
import uvicorn

from cloud_asr.errors import ASRError
from cloud_asr.client import RecognitionClient
from cloud_asr.signing import Signer
from cloud_asr.audio import BufferSource, AudioSource, file_to_pcm16_mono_16k
from cloud_asr.state import Outcome, ErrorKind, SigningScheme
from cloud_asr.runtime import load_settings, configure_logging
from cloud_asr.state.credentials import Credentials
from cloud_asr.config.credentials import get_app_id, get_secret_id, get_secret_key

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NO_SPEECH = 2
EXIT_INTERRUPTED = 130


def _add_credential_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--secret-id", type=str, default=None, help="SecretId (overrides TENCENT_SECRET_ID env)")
    parser.add_argument("--secret-key", type=str, default=None, help="SecretKey (overrides TENCENT_SECRET_KEY env)")
    parser.add_argument("--app-id", type=str, default=None, help="AppId (overrides TENCENT_APP_ID env)")
    parser.add_argument(
        "--scheme",
        choices=[s.value for s in SigningScheme],
        default=None,
        help="Signing scheme (default: ASR_SIGNING_SCHEME env or query-sha1)",
    )
    parser.add_argument("--engine", type=str, default=None, help="engine_model_type, e.g. 16k_zh or 16k_en")


def _credentials(args: argparse.Namespace) -> Credentials:
    return Credentials(
        secret_id=args.secret_id or get_secret_id(),
        secret_key=args.secret_key or get_secret_key(),
        app_id=args.app_id or get_app_id(),
    )


def _parameters(args: argparse.Namespace) -> dict[str, str]:
    return {"engine_model_type": args.engine} if args.engine else {}


def _on_interim(text: str) -> None:
    print(f"\r... {text}", end="", flush=True)


def _on_final(text: str) -> None:
    print(f"\r>>> {text}", flush=True)


def _on_error(kind: ErrorKind, message: str) -> None:
    print(f"\n[{kind.value}] {message}", file=sys.stderr)


def _open_source(args: argparse.Namespace) -> AudioSource:
    if args.mic:
        # PortAudio is only loaded when a microphone is actually requested.
        from cloud_asr.audio.microphone import MicrophoneSource  # noqa: PLC0415

        device = int(args.device) if args.device and args.device.isdigit() else args.device
        return MicrophoneSource(device=device)
    return BufferSource(file_to_pcm16_mono_16k(args.file), realtime=not args.fast)


async def _transcribe(args: argparse.Namespace) -> int:
    client = RecognitionClient(load_settings(args.scheme))
    handle = await client.start(
        _credentials(args),
        _parameters(args),
        _on_interim,
        _on_final,
        _on_error,
        source=_open_source(args),
    )
    if args.mic:
        print(f"Listening for {args.seconds:.0f}s (Ctrl+C to stop)...", file=sys.stderr)
        try:
            await asyncio.wait_for(asyncio.shield(handle.wait()), timeout=args.seconds)
        except TimeoutError:
            await client.stop(handle)
    result = await handle.wait()
    if result.outcome == Outcome.FINAL:
        return EXIT_OK
    if result.outcome == Outcome.NO_SPEECH:
        return EXIT_NO_SPEECH
    return EXIT_OK if result.outcome == Outcome.CANCELLED else EXIT_FAILED


def _sign(args: argparse.Namespace) -> int:
    settings = load_settings(args.scheme)
    signed = Signer.from_settings(settings.signing).sign(_credentials(args), _parameters(args))
    if args.json:
        print(orjson.dumps(signed.as_payload(), option=orjson.OPT_INDENT_2).decode("utf-8"))
        return EXIT_OK
    print(signed.url if args.show_signature else signed.redacted_url())
    return EXIT_OK


def _serve(args: argparse.Namespace) -> int:
    uvicorn.run("cloud_asr.server:build_app", factory=True, host=args.host, port=args.port, log_level="info")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cloud_asr", description="Streaming cloud speech recognition client")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (overrides LOG_LEVEL env)")
    sub = parser.add_subparsers(dest="command", required=True)

    transcribe = sub.add_parser("transcribe", help="Stream an audio file or the microphone and print transcripts")
    source = transcribe.add_mutually_exclusive_group(required=True)
    source.add_argument("file", nargs="?", default=None, help="Audio file to stream (any format soundfile reads)")
    source.add_argument("--mic", action="store_true", help="Capture from the default microphone")
    transcribe.add_argument("--device", type=str, default=None, help="Input device name or index for --mic")
    transcribe.add_argument("--seconds", type=float, default=10.0, help="Capture duration for --mic")
    transcribe.add_argument("--fast", action="store_true", help="Send file audio as fast as possible")
    _add_credential_args(transcribe)

    sign = sub.add_parser("sign", help="Print a signed connection URL")
    sign.add_argument("--show-signature", action="store_true", help="Print the signature instead of a redacted prefix")
    sign.add_argument("--json", action="store_true", help="Print {signature, params, signString} as JSON")
    _add_credential_args(sign)

    serve = sub.add_parser("serve", help="Run the signature endpoint")
    serve.add_argument("--host", type=str, default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        if args.command == "sign":
            return _sign(args)
        if args.command == "serve":
            return _serve(args)
        return asyncio.run(_transcribe(args))
    except ASRError as exc:
        print(f"[{exc.kind.value}] {exc.remediation} ({exc})", file=sys.stderr)
        return EXIT_FAILED
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    raise SystemExit(main())
