#!/usr/bin/env python3
"""
Probe which Gemini models the configured key can use.

Prints the model/version the chat endpoint would try first for GOOGLE_MODEL, then, for
each API version, the models that support generateContent and the fallback the
resolver would pick from that listing. Reads GOOGLE_API_KEY (and the other
GOOGLE_* settings) from the environment or .env.

Run from project root:

    python scripts/probe_models.py
    python scripts/probe_models.py --model gemini-1.5-flash --version v1beta
"""

import argparse
import sys
from pathlib import Path

# Project root on path so "skillup_chat" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from skillup_chat.agent.resolver import GENERATE_METHOD, pick_closest_model, resolve_default_spec
from skillup_chat.agent.types import ApiVersion
from skillup_chat.core.config import load_chat_settings
from skillup_chat.core.errors import ConfigurationError
from skillup_chat.services.chat_service import build_client


def main() -> int:
    parser = argparse.ArgumentParser(description="List Gemini models usable with the configured key.")
    parser.add_argument("--model", help="Model identifier to resolve (default: GOOGLE_MODEL).")
    parser.add_argument(
        "--version",
        choices=[v.value for v in ApiVersion],
        help="API version override (default: GOOGLE_API_VERSION).",
    )
    args = parser.parse_args()

    try:
        settings = load_chat_settings()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 1

    model_id = args.model or settings.model
    primary = resolve_default_spec(model_id, args.version or settings.api_version_override)
    print(f"Primary attempt for {model_id!r}: {primary}")

    with build_client(settings) as client:
        for version in (primary.api_version, primary.api_version.other()):
            models = client.list_models(version)
            usable = [m.model_id for m in models if m.supports(GENERATE_METHOD)]
            print(f"\n{version.value}: {len(models)} models, {len(usable)} support {GENERATE_METHOD}")
            for name in usable:
                print(f"  • {name}")
            print(f"  fallback pick: {pick_closest_model(models, primary.model_name)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
