import random
from typing import Optional

from . import config


def get_rng() -> random.Random:
    # fresh, unseeded generator per request; tests override with a seeded one
    return random.Random()


def get_template_path() -> Optional[str]:
    return config.QUIZ_TEMPLATE_PATH
