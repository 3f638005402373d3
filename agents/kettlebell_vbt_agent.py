#!/usr/bin/env python3
"""Kettlebell VBT Agent (Gemini video understanding)

Sends a kettlebell training video plus its protocol to Gemini and returns
normalized per-rep velocity metrics:
- reps: repNumber, arm, startTime, endTime, duration, velocityScore
- summary: totalReps, avgDuration, avgVelocity, fastestRep, slowestRep, velocityDropoff
- coachingNotes

Usage:
  python -m agents.kettlebell_vbt_agent videos/snatch_test.mp4 protocol.json
"""

from __future__ import annotations

import argparse
import base64
import binascii
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from analysis.errors import CallerError, UpstreamError
from analysis.prompt_builder import build_prompt
from analysis.protocol import parse_protocol
from analysis.rep_report import format_report
from analysis.response_parser import parse_analysis_response
from utils.config import GeminiSettings, load_env
from utils.io import load_json_file, load_video_base64
load_env()

try:
    from google import genai
    from google.genai import types
except ImportError as exc:
    raise ImportError(
        f"Google GenAI library not installed: {exc}\n"
        "Install with: pip install google-genai"
    ) from exc


logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "video/mp4"
MAX_VIDEO_BYTES = 100 * 1024 * 1024


class GeminiVideoClient:
    """Gemini handle configured once and reused for every analysis."""

    def __init__(self, settings: Optional[GeminiSettings] = None, client: Any = None):
        self.settings = settings or GeminiSettings.from_env()
        self.client = client or genai.Client(api_key=self.settings.api_key)

    def generate(self, media: bytes, mime_type: str, instructions: str) -> str:
        """Send video bytes and instructions, return Gemini's raw text."""
        response = self.client.models.generate_content(
            model=self.settings.model,
            contents=[
                types.Part.from_bytes(data=media, mime_type=mime_type),
                instructions,
            ],
            config=types.GenerateContentConfig(
                response_mime_type=self.settings.response_mime_type,
                temperature=self.settings.temperature,
            ),
        )
        return getattr(response, "text", None) or ""


def decode_video(video: str, mime_type: Optional[str]) -> Tuple[bytes, str]:
    """Decode a base64 (or ``data:`` URL) video payload.

    Raises:
        CallerError: If the payload is not base64, is too large, or the mime
            type is not a video type.
    """
    if video.startswith("data:") and "," in video:
        header, video = video.split(",", 1)
        if not mime_type:
            mime_type = header[len("data:"):].split(";", 1)[0] or None
    mime_type = mime_type or DEFAULT_MIME_TYPE
    if not isinstance(mime_type, str):
        raise CallerError(f"mimeType must be a string, got {type(mime_type).__name__}")
    if not mime_type.startswith("video/"):
        raise CallerError(f"Unsupported media type: {mime_type}")

    try:
        media = base64.b64decode(video, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CallerError(f"video must be base64-encoded: {exc}") from exc
    if not media:
        raise CallerError("video is empty")
    if len(media) > MAX_VIDEO_BYTES:
        raise CallerError("Video file must be under 100MB")
    return media, mime_type


class KettlebellVBTAgent:
    """Validate a request, ask Gemini about the video, normalize the reply."""

    def __init__(self, client: Optional[Any] = None):
        self.client = client or GeminiVideoClient()

    def analyze(self, video: Any, mime_type: Optional[str], protocol: Any) -> Dict[str, Any]:
        """Run one analysis.

        Args:
            video: Base64 video data as sent by the web client.
            mime_type: Video mime type, ``video/mp4`` when missing.
            protocol: The request's ``protocol`` object.

        Returns:
            The normalized result. Unparsable Gemini replies still return a
            (degraded) result.

        Raises:
            CallerError: Missing or invalid request data. Gemini is not called.
            UpstreamError: The Gemini call failed.
        """
        if not video or not protocol:
            raise CallerError("Missing video or protocol data", error="Missing video or protocol data")
        if not isinstance(video, str):
            raise CallerError("video must be a base64 string")

        parsed_protocol = parse_protocol(protocol)
        media, mime_type = decode_video(video, mime_type)
        prompt = build_prompt(parsed_protocol)

        logger.info(
            "Analyzing %s video (%.1f MB), protocol: %s",
            mime_type,
            len(media) / (1024 * 1024),
            parsed_protocol,
        )
        try:
            text = self.client.generate(media, mime_type, prompt)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Gemini analysis call failed")
            raise UpstreamError(str(exc) or exc.__class__.__name__) from exc

        result = parse_analysis_response(text)
        logger.info("Analysis complete: %s reps", result["totalReps"])
        return result


def main() -> None:
    parser = argparse.ArgumentParser(description="Kettlebell VBT Agent")
    parser.add_argument("video_path", help="Path to the training video")
    parser.add_argument("protocol_path", help="Path to a protocol JSON file")
    parser.add_argument("--model", help="Gemini model id (defaults to GEMINI_MODEL)")
    parser.add_argument("--json", action="store_true", help="Print the raw result JSON")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    for p in (Path(args.video_path), Path(args.protocol_path)):
        if not p.exists():
            raise FileNotFoundError(p)

    settings = GeminiSettings.from_env()
    if args.model:
        settings = replace(settings, model=args.model)
    video, mime_type = load_video_base64(args.video_path)
    protocol = load_json_file(args.protocol_path)

    agent = KettlebellVBTAgent(GeminiVideoClient(settings))
    result = agent.analyze(video, mime_type, protocol)
    if args.json:
        print(json.dumps(result, indent=2))
    else:
        print(format_report(result))


if __name__ == "__main__":
    main()
