import logging
import sys

from app.core.config import settings


def setup_logging(level: str = None) -> None:
    """Configure le logging racine (à appeler une seule fois, au démarrage)."""
    level = (level or settings.LOG_LEVEL).upper()

    root = logging.getLogger()
    root.setLevel(level)

    # Évite les doublons si l'app est rechargée (uvicorn --reload, tests)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root.addHandler(handler)

    # googleapiclient prévient à chaque build() que le cache de discovery est absent
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)
