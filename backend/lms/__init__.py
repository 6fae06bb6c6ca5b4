"""Course LMS backend package.

Loads environment variables from a local .env file to support local
development and testing without external configuration.
"""

from pathlib import Path

from dotenv import load_dotenv


def _load_local_env():
    # Try backend/.env first, then project root .env
    pkg_dir = Path(__file__).resolve().parent
    candidates = [
        pkg_dir.parent / ".env",
        pkg_dir.parent.parent / ".env",
    ]
    for p in candidates:
        if p.exists():
            load_dotenv(dotenv_path=p, override=False)


_load_local_env()
