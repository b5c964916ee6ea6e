"""Render the demo event sources and print the resulting manifests.

Usage::

    python examples/render_demo.py [path/to/eventsources.yaml]
"""

from __future__ import annotations

import sys
from pathlib import Path

import yaml

from fn_events.config.loader import load_translation_config
from fn_events.translate import translate_config

DEFAULT_CONFIG = Path(__file__).parent / "eventsources.yaml"


def main() -> None:
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_CONFIG
    config = load_translation_config(path)
    for result in translate_config(config):
        print(f"# --- {result.source} ---")
        print(yaml.safe_dump(result.component.to_manifest(), sort_keys=False))
        if result.scaled_object is not None:
            print(yaml.safe_dump(result.scaled_object.to_manifest(), sort_keys=False))


if __name__ == "__main__":
    main()
