import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "upstream_repo": "up-for-grabs/up-for-grabs.net",
    "projects_dir": "_data/projects/",
    "bot_login": "shiftbot",
    "bot_type": "User",
    "maintainer": "shiftkey",
    "comment_limit": 50,
    "check_liveness": True,
    "tag_aliases": {},  # extra "tag: preferred-tag" renames, merged over the built-in list
}


def load_config(config_path: str = ".ufglens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .ufglens.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "tag_aliases": dict(DEFAULT_CONFIG["tag_aliases"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # The deployed bot historically reads SHIFTBOT_GITHUB_TOKEN; GITHUB_TOKEN wins when both are set.
    config["github_token"] = os.environ.get("GITHUB_TOKEN") or os.environ.get("SHIFTBOT_GITHUB_TOKEN")

    return config
