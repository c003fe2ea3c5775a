import json
import os
from pathlib import Path
from typing import Optional

DEFAULT_SETTINGS = {
    "app_name": "Booruhub",
    "user_agent": "booruhub/0.1 (+https://pypi.org/project/booruhub/)",
    "request_timeout": 15,
    "random_seed": None,
    # {"gelbooru.com": {"username": "...", "api_key": "..."}}
    "booru_credentials": {},
}

class Settings:
    def __init__(self):
        self.BASE_DIR = Path(__file__).resolve().parent.parent
        self.DATA_DIR = Path(os.getenv("BOORUHUB_DATA_DIR", self.BASE_DIR / "data"))
        self.SETTINGS_FILE = self.DATA_DIR / "settings.json"

        self.settings = self.load_settings()

    def load_settings(self) -> dict:
        settings = json.loads(json.dumps(DEFAULT_SETTINGS))
        if self.SETTINGS_FILE.exists():
            with open(self.SETTINGS_FILE, 'r') as f:
                settings.update(json.load(f))
        return settings

    def save_settings(self, settings: dict):
        self.settings.update(settings)
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)
        with open(self.SETTINGS_FILE, 'w') as f:
            json.dump(self.settings, f, indent=2)

    def get_credentials(self, domain: str) -> Optional[dict]:
        """Username/API key pair configured for a booru domain, if any."""
        config = self.settings.get("booru_credentials", {}).get(domain.lower())
        if config and config.get("username") and config.get("api_key"):
            return config
        return None

    @property
    def APP_NAME(self) -> str:
        return self.settings["app_name"]

    @property
    def USER_AGENT(self) -> str:
        return os.getenv("BOORUHUB_USER_AGENT") or self.settings["user_agent"]

    @property
    def REQUEST_TIMEOUT(self) -> float:
        return float(os.getenv("BOORUHUB_REQUEST_TIMEOUT") or self.settings["request_timeout"])

    @property
    def RANDOM_SEED(self) -> Optional[int]:
        seed = os.getenv("BOORUHUB_RANDOM_SEED", self.settings.get("random_seed"))
        return int(seed) if seed not in (None, "") else None

settings = Settings()
