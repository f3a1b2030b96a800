"""Local episode library: one directory per podcast under the output base.

    output/<slug>/podcast.json   episode record
    output/<slug>/thumbnail.png  cover art (when downloaded)
    output/<slug>/audio.mp3      narration
    output/<slug>/video.webm     static video
"""

import json
import logging
import os
import re
import shutil
from pathlib import Path

from podcast_producer.constants import OUTPUT_DIR
from podcast_producer.errors import PodcastError
from podcast_producer.models import Podcast

logger = logging.getLogger(__name__)

RECORD_FILENAME = "podcast.json"
THUMBNAIL_FILENAME = "thumbnail.png"
AUDIO_FILENAME = "audio.mp3"
VIDEO_FILENAME = "video.webm"


class PodcastNotFound(PodcastError, LookupError):
    status = 404


def slug_from_title(title: str) -> str:
    """Convert a title to a directory slug.

    "The Future of AI!" → "the_future_of_ai"
    """
    slug = re.sub(r"[^a-zA-Z0-9]+", "_", title).strip("_").lower()
    return slug or "podcast"


def _project_dir(slug: str, output_base: str) -> str:
    return os.path.join(output_base, slug)


def _unique_slug(title: str, output_base: str) -> str:
    base = slug_from_title(title)
    slug = base
    n = 2
    while os.path.exists(_project_dir(slug, output_base)):
        slug = f"{base}_{n}"
        n += 1
    return slug


def save_podcast(podcast: Podcast, output_base: str = OUTPUT_DIR) -> str:
    """Write podcast.json. Returns the path written."""
    project_dir = _project_dir(podcast.slug, output_base)
    os.makedirs(project_dir, exist_ok=True)
    path = os.path.join(project_dir, RECORD_FILENAME)
    with open(path, "w") as f:
        json.dump(podcast.to_dict(), f, indent=2)
    return path


def create_podcast(podcast: Podcast, output_base: str = OUTPUT_DIR) -> Podcast:
    """Store a new podcast under a fresh slug derived from its title."""
    podcast.slug = _unique_slug(podcast.title, output_base)
    save_podcast(podcast, output_base)
    logger.info("Created podcast %s", podcast.slug)
    return podcast


def load_podcast(slug: str, output_base: str = OUTPUT_DIR) -> Podcast:
    path = os.path.join(_project_dir(slug, output_base), RECORD_FILENAME)
    if not os.path.exists(path):
        raise PodcastNotFound(f"Podcast '{slug}' not found")
    with open(path) as f:
        podcast = Podcast.from_dict(json.load(f))
    podcast.slug = slug
    return podcast


def update_podcast(slug: str, output_base: str = OUTPUT_DIR, **changes) -> Podcast:
    """Apply field changes to a stored podcast and save it."""
    podcast = load_podcast(slug, output_base)
    for key, value in changes.items():
        if not hasattr(podcast, key):
            raise AttributeError(f"Podcast has no field '{key}'")
        setattr(podcast, key, value)
    save_podcast(podcast, output_base)
    return podcast


def delete_podcast(slug: str, output_base: str = OUTPUT_DIR) -> None:
    project_dir = _project_dir(slug, output_base)
    if not os.path.exists(os.path.join(project_dir, RECORD_FILENAME)):
        raise PodcastNotFound(f"Podcast '{slug}' not found")
    shutil.rmtree(project_dir)
    logger.info("Deleted podcast %s", slug)


def list_podcasts(output_base: str = OUTPUT_DIR) -> list[Podcast]:
    """All stored podcasts, newest first."""
    if not os.path.exists(output_base):
        return []
    podcasts = []
    for name in os.listdir(output_base):
        if os.path.exists(os.path.join(output_base, name, RECORD_FILENAME)):
            podcasts.append(load_podcast(name, output_base))
    return sorted(podcasts, key=lambda p: p.created_at, reverse=True)


def write_media(slug: str, filename: str, data: bytes, output_base: str = OUTPUT_DIR) -> str:
    """Write a stage output next to the record. Returns its file:// URI."""
    project_dir = _project_dir(slug, output_base)
    os.makedirs(project_dir, exist_ok=True)
    path = os.path.join(project_dir, filename)
    with open(path, "wb") as f:
        f.write(data)
    return Path(path).resolve().as_uri()


def get_podcast_status(podcast: Podcast) -> dict:
    """Return which stages of an episode are complete."""
    return {
        "script": {"state": "done" if podcast.script.strip() else "pending"},
        "thumbnail": {"state": "done" if podcast.thumbnail_url else "pending"},
        "audio": {"state": "done" if podcast.audio_url else "pending"},
        "video": {"state": "done" if podcast.video_url else "pending"},
    }
